import logging

from livemap import alerts
from livemap.alerts import LoggingAlertPresenter


def test_presenter_echoes_and_records(capsys, caplog):
    presenter = LoggingAlertPresenter()
    with caplog.at_level(logging.WARNING, logger="livemap.alerts"):
        presenter.present(alerts.LOCATION_UNAVAILABLE)

    assert presenter.presented == [alerts.LOCATION_UNAVAILABLE]
    assert presenter.current == alerts.LOCATION_UNAVAILABLE
    assert capsys.readouterr().out == (
        "[ALERT] Current Location Not Available: "
        "Your current location can't be determined at this time.\n"
    )
    assert "Current Location Not Available" in caplog.text


def test_acknowledge_clears_current():
    presenter = LoggingAlertPresenter(echo=False)
    presenter.present(alerts.LOCATION_ACCESS_DENIED)
    presenter.acknowledge()

    assert presenter.current is None
    assert presenter.presented == [alerts.LOCATION_ACCESS_DENIED]


def test_alert_texts_name_the_app():
    assert '"livemap"' in alerts.LOCATION_SERVICES_OFF.title
    assert alerts.LOCATION_SERVICES_OFF.message == "Go to Settings > Privacy > Location Services"
    assert alerts.LOCATION_ACCESS_DENIED.message == "Go to Settings > Screen Time > Content & Privacy Restrictions"
