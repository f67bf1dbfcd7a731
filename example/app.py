"""app: serve requests with wsgiref."""

import json
import re
from wsgiref.simple_server import make_server

from webmux import EnvKey, Mux, StatusCode

app = Mux(name="app", debug=True)
current_user = EnvKey("app", "user")


def auth(c, h):
    """Record the user named in the ``x-user`` header."""

    def handler(request, writer):
        user = request.headers.get("x-user")
        if user:
            current_user.set(c, user)
        h(request, writer)

    return handler


def admin_only(c, h):
    """Reject anonymous requests under /admin."""

    def handler(request, writer):
        if request.path.startswith("/admin") and not current_user.isset(c):
            writer.write_header(StatusCode.BAD_REQUEST)
            writer.write("Who are you?")
            return
        h(request, writer)

    return handler


def powered_by(h):
    """Add a response header."""

    def handler(request, writer):
        writer.header["X-Powered-By"] = "webmux"
        h(request, writer)

    return handler


app.use(auth)
app.use(powered_by)
app.use(admin_only)


@app.get("/")
def main(request, writer):
    writer.header["Content-Type"] = "text/plain"
    writer.write("Yo")


@app.get("/hello/:name")
def hello(c, request, writer):
    greeter = current_user.get(c, "Stranger")
    writer.write(f"Hello, {c.url_params['name']}! Regards, {greeter}")


@app.get(re.compile(r"^/ip/(?P<ip>(?:\d{1,3}\.){3}\d{1,3})$"))
def ip_info(c, request, writer):
    writer.write(f"Info for IP address {c.url_params['ip']}")


@app.get("/files/*")
def files(c, request, writer):
    writer.header["Content-Type"] = "application/json"
    writer.write(json.dumps({"path": c.url_params["*"]}))


@app.get("/admin/stats")
def stats(c, request, writer):
    writer.write(f"{len(app.routes)} routes")


if __name__ == "__main__":
    with make_server("", 8000, app) as server:
        server.serve_forever()
