"""
Tests for user authorization functionality
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram import Update, User
from telegram.ext import ContextTypes

from flashdeck.bot_handler import BotHandler
from flashdeck.config import Settings


def make_handler(allowed_users: str) -> BotHandler:
    settings = Settings(telegram_bot_token="test_token", allowed_users=allowed_users)
    return BotHandler(settings, db_manager=MagicMock(), words=[], sentences=[])


class TestUserAuthorization:
    """Test user authorization functionality"""

    def test_is_user_authorized_empty_list(self):
        """Test authorization when no users are configured - should disallow all"""
        handler = make_handler("")

        assert not handler._is_user_authorized(321)
        assert not handler._is_user_authorized(123)

    def test_is_user_authorized_with_allowed_users(self):
        """Test authorization with specific allowed users"""
        handler = make_handler("321,123")

        assert handler._is_user_authorized(321)
        assert handler._is_user_authorized(123)
        assert not handler._is_user_authorized(111)

    @pytest.mark.asyncio
    async def test_check_authorization_allowed_user(self):
        """Test authorization check for allowed user"""
        handler = make_handler("321")

        update = MagicMock(spec=Update)
        update.effective_user = User(id=321, is_bot=False, first_name="Test")
        context = MagicMock(spec=ContextTypes.DEFAULT_TYPE)
        handler._safe_reply = AsyncMock()

        assert await handler._check_authorization(update, context) is True
        handler._safe_reply.assert_not_called()

    @pytest.mark.asyncio
    async def test_check_authorization_denied_user(self):
        """Test authorization check for denied user"""
        handler = make_handler("321")

        update = MagicMock(spec=Update)
        update.effective_user = User(id=999, is_bot=False, first_name="Stranger")
        context = MagicMock(spec=ContextTypes.DEFAULT_TYPE)
        handler._safe_reply = AsyncMock()

        assert await handler._check_authorization(update, context) is False
        handler._safe_reply.assert_called_once()
        assert "do not have access" in handler._safe_reply.call_args[0][1]

    @pytest.mark.asyncio
    async def test_require_authorization_decorator(self):
        """Denied users never reach the wrapped handler"""
        handler = make_handler("321")
        handler._safe_reply = AsyncMock()
        wrapped_target = AsyncMock(return_value="done")
        wrapped = handler.require_authorization(wrapped_target)

        denied = MagicMock(spec=Update)
        denied.effective_user = User(id=999, is_bot=False, first_name="Stranger")
        context = MagicMock(spec=ContextTypes.DEFAULT_TYPE)
        assert await wrapped(denied, context) is None
        wrapped_target.assert_not_called()

        allowed = MagicMock(spec=Update)
        allowed.effective_user = User(id=321, is_bot=False, first_name="Test")
        assert await wrapped(allowed, context) == "done"

    def test_run_requires_token(self):
        settings = Settings(telegram_bot_token="", allowed_users="321")
        handler = BotHandler(settings, db_manager=MagicMock(), words=[], sentences=[])

        with pytest.raises(ValueError):
            handler.run()


class TestSettings:
    """Test configuration parsing"""

    def test_allowed_users_list(self):
        settings = Settings(allowed_users=" 321, 123 ,,")
        assert settings.allowed_users_list == [321, 123]

    def test_engine_defaults(self):
        settings = Settings()
        assert settings.required_per_direction == 5
        assert settings.open_deck_size == 80
        assert settings.lock_milestone == 50
        assert settings.unlock_streak_required == 100
        assert settings.min_ease_factor == 1.3
        assert settings.max_ease_factor == 2.5
