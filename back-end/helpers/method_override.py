import logging
from urllib.parse import parse_qs

logger = logging.getLogger(__name__)

OVERRIDE_FIELD = "_method"
OVERRIDE_HEADER = b"x-http-method-override"
ALLOWED_METHODS = {"PUT", "DELETE"}
FORM_CONTENT_TYPE = b"application/x-www-form-urlencoded"

class MethodOverrideMiddleware:
    """
    Lets HTML forms send PUT and DELETE requests.

    A POST request is rewritten when it carries the override marker in one of:
    - the query string (?_method=PUT)
    - an X-HTTP-Method-Override header
    - a urlencoded form field named _method

    The request body is buffered only in the last case and replayed to the app
    unchanged, so route handlers can still read the form.
    """

    def __init__(self, app, field: str = OVERRIDE_FIELD):
        self.app = app
        self.field = field

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope["method"] != "POST":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers") or [])
        override = self._from_query(scope) or headers.get(OVERRIDE_HEADER, b"").decode("latin-1")

        if not override and headers.get(b"content-type", b"").split(b";")[0].strip() == FORM_CONTENT_TYPE:
            body, receive = await self._buffer_body(receive)
            form = parse_qs(body.decode("latin-1"))
            override = (form.get(self.field) or [""])[0]

        method = override.strip().upper()
        if method in ALLOWED_METHODS:
            logger.debug(f"Overriding POST {scope['path']} as {method}")
            scope = dict(scope, method=method)
        elif method:
            logger.warning(f"Ignoring unsupported method override: {method}")

        await self.app(scope, receive, send)

    def _from_query(self, scope) -> str:
        query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
        return (query.get(self.field) or [""])[0]

    async def _buffer_body(self, receive):
        messages = []
        more_body = True
        while more_body:
            message = await receive()
            messages.append(message)
            if message["type"] != "http.request":
                break
            more_body = message.get("more_body", False)

        body = b"".join(message.get("body", b"") for message in messages)

        async def replay():
            if messages:
                return messages.pop(0)
            return await receive()

        return body, replay
