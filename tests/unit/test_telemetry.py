"""Unit tests for the OpenTelemetry configuration."""

from app.shared.telemetry.telemetry import TelemetryConfig


def test_resource_carries_service_and_workflow_settings() -> None:
    config = TelemetryConfig(
        "pm-relay",
        "0.1.0",
        environment="staging",
        worker_enabled=True,
        max_attempts=5,
        reminder_timezone="Africa/Kampala",
    )

    attributes = config.build_resource().attributes

    assert attributes["service.name"] == "pm-relay"
    assert attributes["service.version"] == "0.1.0"
    assert attributes["deployment.environment"] == "staging"
    assert attributes["workflow.worker.enabled"] is True
    assert attributes["workflow.max_attempts"] == 5
    assert attributes["workflow.reminder_timezone"] == "Africa/Kampala"


def test_disabled_telemetry_sets_up_nothing() -> None:
    config = TelemetryConfig("pm-relay", "0.1.0", enabled=False)

    assert config.setup_telemetry(exporter_type="console") is None
    assert config.tracer_provider is None
    config.shutdown()
