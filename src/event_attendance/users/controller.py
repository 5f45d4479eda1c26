from __future__ import annotations

from flask import Flask, g

from ..common.http import bearer_required, json_body, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        body = json_body()
        result = container.auth_service.register(
            username=body.get("username", ""),
            email=body.get("email", ""),
            password=body.get("password", ""),
        )
        return ok(
            {"token": result.token, "user": result.user.public_view()},
            message="User registered successfully",
            status=201,
        )

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        body = json_body()
        result = container.auth_service.login(email=body.get("email", ""), password=body.get("password", ""))
        return ok({"token": result.token, "user": result.user.public_view()}, message="Login successful")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @bearer_required
    def auth_me():
        return ok(g.organizer.public_view())
