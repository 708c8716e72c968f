from __future__ import annotations

from flask import Flask

from ..common.http import api_view, current_principal, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/dashboard/stats", methods=["GET"], endpoint="dashboard_stats")
    @api_view
    @login_required
    def dashboard_stats():
        return ok(container.dashboard_service.stats(current_principal()))
