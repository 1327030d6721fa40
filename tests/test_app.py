"""Tests for application wiring: health check and error envelopes."""

from auto_services_api.app.core.config import settings

API = "/api/v1"


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": f"{settings.project_name} is running"}


def test_unknown_route_uses_the_envelope(client):
    response = client.get(f"{API}/nowhere")
    assert response.status_code == 404
    assert response.json()["success"] is False


def test_malformed_json_is_a_validation_error(client, register):
    user = register()
    response = client.post(
        f"{API}/orders",
        content=b"{not json",
        headers={**user.headers, "Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_cors_preflight(client):
    origin = settings.cors_origins[0] if settings.cors_origins else "http://localhost:3000"
    response = client.options(
        f"{API}/services",
        headers={"Origin": origin, "Access-Control-Request-Method": "GET"},
    )
    assert response.status_code == 200


def test_setup_logging_is_idempotent(tmp_path):
    from logging.handlers import RotatingFileHandler

    from auto_services_api.app.core.logging_config import setup_logging

    logfile = tmp_path / "logs" / "api.log"
    logger = setup_logging("debug", str(logfile))
    count = len(logger.handlers)
    assert setup_logging("debug", str(logfile)) is logger
    assert len(logger.handlers) == count
    assert logfile.parent.is_dir()

    logger.getChild("services.policy").warning("denied")
    for handler in logger.handlers:
        handler.flush()
    assert "denied" in logfile.read_text(encoding="utf-8")

    for handler in [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]:
        logger.removeHandler(handler)
        handler.close()


def test_router_level_errors_use_the_envelope(client):
    response = client.delete("/")
    assert response.status_code == 405
    assert response.json() == {"success": False, "message": "Method Not Allowed"}
