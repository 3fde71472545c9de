"""Session-level commands: approval-mode toggles and context usage report."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from webtools_mcp.config import Settings
from webtools_mcp.safety.approval import ApprovalMode, ApprovalState

logger = logging.getLogger(__name__)

# Context window sizes by model-name prefix; longest matching prefix wins
MODEL_TOKEN_LIMITS: Dict[str, int] = {
    "gemini-1.5-pro": 2_097_152,
    "gemini-1.5-flash": 1_048_576,
    "gemini-2": 1_048_576,
    "gpt-4o": 128_000,
    "gpt-4.1": 1_047_576,
    "claude": 200_000,
    "llama-3": 131_072,
    "qwen": 131_072,
}

PLAN_ENABLED = (
    "📋 Plan mode enabled! Analysis only - no file edits or commands will run.\n"
    "   The AI will present a plan and wait for your confirmation.\n"
    "   Use /plan again to disable, or /approval-mode default to return to normal."
)
PLAN_DISABLED = "✏️ Plan mode disabled. Returning to default approval mode."
YOLO_ENABLED = (
    "⚡ YOLO mode enabled! All tool calls will be auto-approved.\n"
    "   Use /yolo again to disable, or /approval-mode default to return to normal."
)
YOLO_DISABLED = "🛡️ YOLO mode disabled. Returning to default approval mode."


class SessionModeService:
    """Plan / YOLO toggles over the shared ``ApprovalState``."""

    def __init__(self, approval: ApprovalState):
        self._approval = approval

    def toggle_plan(self) -> Dict[str, Any]:
        mode = self._approval.toggle(ApprovalMode.PLAN)
        content = PLAN_ENABLED if mode == ApprovalMode.PLAN else PLAN_DISABLED
        return _message(content, mode)

    def toggle_yolo(self) -> Dict[str, Any]:
        mode = self._approval.toggle(ApprovalMode.YOLO)
        content = YOLO_ENABLED if mode == ApprovalMode.YOLO else YOLO_DISABLED
        return _message(content, mode)

    @property
    def mode(self) -> ApprovalMode:
        return self._approval.mode


def _message(content: str, mode: ApprovalMode) -> Dict[str, Any]:
    return {"message_type": "info", "content": content, "mode": mode.value}


# ---------------------------------------------------------------------------
# Context usage
# ---------------------------------------------------------------------------


def format_token_count(count: int) -> str:
    """Abbreviate a token count: 1234 -> "1.2k", 1234567 -> "1.2M"."""
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}k"
    return str(count)


def usage_level(usage_percent: float) -> str:
    """Bucket a usage percentage: healthy / moderate / warning / critical."""
    if usage_percent >= 90:
        return "critical"
    if usage_percent >= 75:
        return "warning"
    if usage_percent >= 50:
        return "moderate"
    return "healthy"


def progress_bar(usage_percent: float, width: int = 10) -> str:
    filled = min(width, max(0, round(usage_percent / 100 * width)))
    return "█" * filled + "░" * (width - filled)


class ContextUsageService:
    """Report how much of a model's context window a prompt uses.

    Args:
        settings: Provides the fallback context window size.
        limits: Model-prefix → token limit table (defaults to MODEL_TOKEN_LIMITS).
    """

    def __init__(self, settings: Settings, limits: Optional[Mapping[str, int]] = None):
        self._default_limit = settings.default_context_window
        self._limits = dict(MODEL_TOKEN_LIMITS if limits is None else limits)

    def token_limit(self, model: str) -> int:
        name = (model or "").lower()
        matches = [p for p in self._limits if name.startswith(p)]
        if not matches:
            return self._default_limit
        return self._limits[max(matches, key=len)]

    def report(self, prompt_token_count: int, model: str) -> Dict[str, Any]:
        max_tokens = self.token_limit(model)
        used_percent = prompt_token_count / max_tokens * 100
        remaining_percent = 100 - used_percent
        used = format_token_count(prompt_token_count)
        maximum = format_token_count(max_tokens)
        bar = progress_bar(used_percent, 8)
        return {
            "model": model,
            "prompt_tokens": prompt_token_count,
            "max_tokens": max_tokens,
            "used_percent": round(used_percent, 1),
            "remaining_percent": round(remaining_percent, 1),
            "level": usage_level(used_percent),
            "compact": f"{remaining_percent:.0f}% left",
            "summary": f"{used}/{maximum} ({remaining_percent:.0f}% left)",
            "progress": f"{bar} {used}/{maximum}",
        }
