"""Unit tests for the application entry point."""

from unittest.mock import patch

from jalsampada.config import get_settings
from jalsampada.main import create_app, run


class TestRun:
    def test_serves_app_with_uvicorn(self):
        settings = get_settings()
        with patch("uvicorn.run") as uvicorn_run:
            run()

        uvicorn_run.assert_called_once_with(
            "jalsampada.main:app",
            host=settings.host,
            port=settings.port,
            reload=settings.is_development,
        )

    def test_routes_registered(self):
        paths = {route.path for route in create_app().routes}
        assert "/health" in paths
        assert "/api/forms/{slug}/records/{name}" in paths
