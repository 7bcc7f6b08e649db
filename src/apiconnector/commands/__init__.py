"""Built-in CLI sub-commands for apiconnector.

* :mod:`~apiconnector.commands.request` -- ``fetch``, ``post`` and ``uri``,
  registered directly on the root app.
* :mod:`~apiconnector.commands.cache` -- the ``cache`` group (``stats``,
  ``clear``).
* :mod:`~apiconnector.commands.settings` -- the ``settings`` group
  (``show``).
* :mod:`~apiconnector.commands.context` -- helpers shared by the commands.
"""
