"""
Request body size cap.

Requests with a Content-Length above the cap are rejected straight away.
Requests without one (chunked uploads) are buffered up to the cap and then
replayed to the app, or rejected as soon as the cap is crossed.
"""
from fastapi.responses import JSONResponse

TOO_LARGE = {"error": "Request body too large"}


class BodySizeLimitMiddleware:
    def __init__(self, app, max_body_bytes: int):
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = dict(scope["headers"]).get(b"content-length")
        if length is not None:
            if length.isdigit() and int(length) > self.max_body_bytes:
                await JSONResponse(status_code=413, content=TOO_LARGE)(scope, receive, send)
                return
            await self.app(scope, receive, send)
            return

        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                # client went away before sending the body
                return
            body = message.get("body", b"")
            received += len(body)
            if received > self.max_body_bytes:
                await JSONResponse(status_code=413, content=TOO_LARGE)(scope, receive, send)
                return
            chunks.append(body)
            more_body = message.get("more_body", False)

        buffered = {"type": "http.request", "body": b"".join(chunks), "more_body": False}
        replayed = False

        async def replay():
            nonlocal replayed
            if not replayed:
                replayed = True
                return buffered
            return await receive()

        await self.app(scope, replay, send)
