import logging
from datetime import datetime

from wpbot.core.base import BotStatus
from wpbot.telegram import messages
from wpbot.telegram.notifier import TelegramNotifier


def _notifier(limiter, session, token="123:abc", chat_id="42"):
    return TelegramNotifier(
        bot_token=token,
        chat_id=chat_id,
        rate_limiter=limiter,
        session_factory=lambda: session,
    )


async def test_send_posts_html_message_and_records_call(make_limiter, session):
    limiter = make_limiter()
    notifier = _notifier(limiter, session)

    assert await notifier.send("<b>hi</b>") is True

    url, payload = session.posts[0]
    assert url == "https://api.telegram.org/bot123:abc/sendMessage"
    assert payload == {"chat_id": "42", "text": "<b>hi</b>", "parse_mode": "HTML"}
    assert limiter.recent_call_count == 1


async def test_send_skips_when_not_configured(make_limiter, session):
    limiter = make_limiter()
    notifier = _notifier(limiter, session, token="")

    assert notifier.is_configured is False
    assert await notifier.send("hello") is False
    assert session.posts == []
    assert limiter.recent_call_count == 0


async def test_send_drops_call_when_rate_limited(make_limiter, session):
    limiter = make_limiter(per_minute=1)
    notifier = _notifier(limiter, session)

    assert await notifier.send("first") is True
    assert await notifier.send("second") is False
    assert [p["text"] for _, p in session.posts] == ["first"]
    assert limiter.recent_call_count == 1


async def test_rate_limited_send_logs_one_denial(make_limiter, session, caplog):
    limiter = make_limiter(per_minute=1)
    notifier = _notifier(limiter, session)
    await notifier.send("first")

    with caplog.at_level(logging.WARNING, logger="wpbot"):
        assert await notifier.send("second") is False

    events = [r.getMessage() for r in caplog.records]
    assert len([m for m in events if "event=rate_limit_minute" in m]) == 1
    assert any("event=telegram_rate_limited" in m and "wait_ms=60000" in m for m in events)


async def test_http_error_is_reported_but_still_counted(make_limiter, make_session):
    limiter = make_limiter()
    session = make_session(status=429)
    notifier = _notifier(limiter, session)

    assert await notifier.send("hello") is False
    assert len(session.posts) == 1
    assert limiter.recent_call_count == 1


async def test_connection_error_is_not_counted(make_limiter, make_session):
    limiter = make_limiter()
    session = make_session(error=ConnectionError("boom"))
    notifier = _notifier(limiter, session)

    assert await notifier.send("hello") is False
    assert limiter.recent_call_count == 0


async def test_send_when_allowed_waits_for_free_slot(make_limiter, clock, session, fake_sleep):
    limiter = make_limiter(per_minute=1)
    notifier = _notifier(limiter, session)

    assert await notifier.send("first") is True
    clock.advance(15_000)
    assert await notifier.send_when_allowed("second") is True

    assert fake_sleep == [45.0]
    assert [p["text"] for _, p in session.posts] == ["first", "second"]
    # booked once by wait_for_slot, not again after the post
    assert limiter.recent_call_count == 2


async def test_send_when_allowed_gives_up_past_max_wait(make_limiter, session, fake_sleep):
    limiter = make_limiter(per_minute=1)
    notifier = _notifier(limiter, session)

    assert await notifier.send("first") is True
    assert await notifier.send_when_allowed("second", max_wait_ms=5_000) is False
    assert len(session.posts) == 1


async def test_notify_status_sends_counts(make_limiter, session):
    notifier = _notifier(make_limiter(), session)
    status = BotStatus(is_paused=True, queue_length=3, completed_count=7, failed_count=1)

    assert await notifier.notify_status(status) is True
    text = session.posts[0][1]["text"]
    assert "⏸️ 일시정지" in text
    assert "📝 대기: 3개" in text
    assert "✅ 완료: 7개" in text
    assert "❌ 실패: 1개" in text
    assert "처리중" not in text


async def test_notify_helpers_share_the_budget(make_limiter, session):
    limiter = make_limiter(per_minute=3)
    notifier = _notifier(limiter, session)

    assert await notifier.notify_batch_start(5) is True
    assert await notifier.notify_publish_success("Title", "https://example.com") is True
    assert await notifier.notify_publish_failed("Title", "timeout") is True
    assert await notifier.notify_batch_complete(4, 1) is False
    assert len(session.posts) == 3


def test_publish_success_escapes_user_text():
    now = datetime(2026, 1, 2, 3, 4, 5)
    text = messages.format_publish_success("<script>", "https://a.b/?x=1&y=2", now=now)
    assert "&lt;script&gt;" in text
    assert "x=1&amp;y=2" in text
    assert text.startswith("✅ <b>발행 완료</b>")
    assert text.endswith("⏰ 2026-01-02 03:04:05")


def test_status_includes_current_item_when_present():
    status = BotStatus(is_paused=False, queue_length=0, completed_count=0, failed_count=0, current_item="Post & co")
    text = messages.format_status(status)
    assert "▶️ 진행중" in text
    assert "🔄 처리중: Post &amp; co" in text


def test_batch_messages():
    now = datetime(2026, 1, 2, 3, 4, 5)
    assert "📊 총 12개 글 생성 예정" in messages.format_batch_start(12, now=now)
    done = messages.format_batch_complete(10, 2, now=now)
    assert "✅ 성공: 10개" in done
    assert "❌ 실패: 2개" in done
    assert "/resume" in messages.format_paused()
    assert "재개됨" in messages.format_resumed()
