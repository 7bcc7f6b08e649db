"""HTTP client module for apiconnector.

Provides :class:`ApiClient`, a thin adapter over :mod:`httpx` that applies a
connector's connect timeout and optional Basic credentials to every
request, makes exactly one attempt, and turns transport failures into
logged ``None``/``False`` results instead of exceptions.

Example::

    from apiconnector.client import ApiClient

    client = ApiClient(settings)
    response = client.get(uri)
    if response is not None:
        print(response.text)
"""

from apiconnector.client.sync_client import ApiClient, POST_SUCCESS_CODES

__all__ = ["ApiClient", "POST_SUCCESS_CODES"]
