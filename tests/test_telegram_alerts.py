"""
Tests for outbound Telegram alerts.

requests.post is patched; nothing is sent.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from near_monitor.alerts import AlertConfig, TelegramAlerts, format_balance_change


@pytest.fixture
def alerts():
    return TelegramAlerts(AlertConfig(bot_token="TOKEN", min_message_interval=0))


class TestFormatting:
    """Test alert text."""

    def test_unknown_previous_balance(self):
        """Should show Unknown when there was no previous sample."""
        text = format_balance_change("a.near", None, 10 ** 24)
        assert text == "🚨 Balance Update for a.near!\n\nOld: Unknown\nNew: 1.0000 NEAR"

    def test_known_previous_balance(self):
        """Should show both balances."""
        text = format_balance_change("a.near", 10 ** 24, 0)
        assert "Old: 1.0000 NEAR" in text
        assert "New: 0.0000 NEAR" in text


class TestDeliver:
    """Test sendMessage delivery."""

    def test_requires_token(self):
        """Should refuse to build without a token unless dry run."""
        with pytest.raises(ValueError):
            TelegramAlerts(AlertConfig(bot_token=""))
        assert TelegramAlerts(AlertConfig(bot_token="", dry_run=True)) is not None

    def test_success(self, alerts):
        """Should post the text to the subscriber's chat."""
        with patch("near_monitor.alerts.telegram.requests.post") as post:
            post.return_value = MagicMock(status_code=200)
            assert alerts.deliver(7, "hello") is True

        url = post.call_args.args[0]
        assert url == "https://api.telegram.org/botTOKEN/sendMessage"
        assert post.call_args.kwargs["json"] == {"chat_id": 7, "text": "hello"}
        assert post.call_args.kwargs["timeout"] == 10

    def test_http_error(self, alerts):
        """Should return False when Telegram rejects the message."""
        response = MagicMock(status_code=403)
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)

        with patch("near_monitor.alerts.telegram.requests.post", return_value=response):
            assert alerts.deliver(7, "hello") is False

    @pytest.mark.parametrize("error", [
        requests.exceptions.Timeout(),
        requests.exceptions.ConnectionError(),
        requests.exceptions.RequestException(),
    ])
    def test_network_errors(self, alerts, error):
        """Should return False on transport failures."""
        with patch("near_monitor.alerts.telegram.requests.post", side_effect=error):
            assert alerts.deliver(7, "hello") is False

    def test_token_not_logged(self, alerts, caplog):
        """Should never write the bot token to the log."""
        response = MagicMock(status_code=401)
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            "401 for url https://api.telegram.org/botTOKEN/sendMessage", response=response
        )
        with patch("near_monitor.alerts.telegram.requests.post", return_value=response):
            alerts.deliver(7, "hello")

        assert "TOKEN" not in caplog.text

    def test_long_message_truncated(self, alerts):
        """Should cut messages to Telegram's length limit."""
        with patch("near_monitor.alerts.telegram.requests.post") as post:
            alerts.deliver(7, "x" * 10000)

        assert len(post.call_args.kwargs["json"]["text"]) <= 4000

    def test_dry_run_does_not_post(self, capsys):
        """Should print instead of sending in dry run."""
        alerts = TelegramAlerts(AlertConfig(bot_token="", dry_run=True))
        with patch("near_monitor.alerts.telegram.requests.post") as post:
            assert alerts.deliver(7, "hello") is True

        post.assert_not_called()
        assert "hello" in capsys.readouterr().out


class TestBalanceAlert:
    """Test the balance change alert entry point."""

    def test_sends_formatted_change(self, alerts):
        """Should deliver the formatted change to the subscriber."""
        with patch("near_monitor.alerts.telegram.requests.post") as post:
            assert alerts.send_balance_alert(7, "a.near", None, 10 ** 24) is True

        assert post.call_args.kwargs["json"] == {
            "chat_id": 7,
            "text": format_balance_change("a.near", None, 10 ** 24),
        }


class TestBroadcast:
    """Test sending one message to many subscribers."""

    def test_counts(self, alerts):
        """Should count successes and failures separately."""
        ok = MagicMock(status_code=200)
        with patch(
            "near_monitor.alerts.telegram.requests.post",
            side_effect=[ok, requests.exceptions.ConnectionError(), ok],
        ):
            assert alerts.broadcast([1, 2, 3], "restart") == (2, 1)
