"""Canned notification texts (Telegram HTML parse mode).

User supplied values are HTML-escaped; everything else is fixed markup.
"""
from datetime import datetime
from html import escape
from typing import Optional

from wpbot.core.base import BotStatus

DEFAULT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _stamp(now: Optional[datetime], time_format: str) -> str:
    return (now or datetime.now()).strftime(time_format)


def format_publish_success(title: str, site_url: str, now: Optional[datetime] = None, time_format: str = DEFAULT_TIME_FORMAT) -> str:
    return (
        "✅ <b>발행 완료</b>\n\n"
        f"📝 {escape(title)}\n"
        f"🌐 {escape(site_url)}\n"
        f"⏰ {_stamp(now, time_format)}"
    )


def format_publish_failed(title: str, error: str, now: Optional[datetime] = None, time_format: str = DEFAULT_TIME_FORMAT) -> str:
    return (
        "❌ <b>발행 실패</b>\n\n"
        f"📝 {escape(title)}\n"
        f"⚠️ {escape(error)}\n"
        f"⏰ {_stamp(now, time_format)}"
    )


def format_batch_start(count: int, now: Optional[datetime] = None, time_format: str = DEFAULT_TIME_FORMAT) -> str:
    return (
        "🚀 <b>배치 발행 시작</b>\n\n"
        f"📊 총 {count}개 글 생성 예정\n"
        f"⏰ {_stamp(now, time_format)}"
    )


def format_batch_complete(success: int, failed: int, now: Optional[datetime] = None, time_format: str = DEFAULT_TIME_FORMAT) -> str:
    return (
        "🎉 <b>배치 발행 완료</b>\n\n"
        f"✅ 성공: {success}개\n"
        f"❌ 실패: {failed}개\n"
        f"⏰ {_stamp(now, time_format)}"
    )


def format_paused() -> str:
    return "⏸️ <b>일시정지됨</b>\n\n재개하려면 /resume 명령을 사용하세요."


def format_resumed() -> str:
    return "▶️ <b>재개됨</b>\n\n발행이 계속됩니다."


def format_status(status: BotStatus, now: Optional[datetime] = None, time_format: str = DEFAULT_TIME_FORMAT) -> str:
    state = "⏸️ 일시정지" if status.is_paused else "▶️ 진행중"
    lines = [
        "📊 <b>현재 상태</b>",
        "",
        state,
        f"📝 대기: {status.queue_length}개",
        f"✅ 완료: {status.completed_count}개",
        f"❌ 실패: {status.failed_count}개",
    ]
    if status.current_item:
        lines.append(f"🔄 처리중: {escape(status.current_item)}")
    lines.append(f"⏰ {_stamp(now, time_format)}")
    return "\n".join(lines)
