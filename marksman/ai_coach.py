"""
AI shooting coach for Marksman (optional ``ai`` extra).

Uses Anthropic's Claude API to write a short narrative on top of the
deterministic insights:
  A) History analysis: pooled metrics + trend → coaching narrative
  B) Pressure analysis: low vs. higher pressure → mental-game advice

Only numbers leave the device; no target images are sent.
"""

import json
import logging
from typing import Optional

import anthropic

from marksman.analysis import HistorySummary
from marksman.database.db import Database
from marksman.utils.config import Config

logger = logging.getLogger(__name__)

MODEL = "claude-sonnet-4-20250514"


class AIGroupCoach:
    """Claude-powered narrative coaching over shooting history.

    Attributes:
        client: Anthropic API client.
        db: Database for persisting feedback (optional).
    """

    def __init__(self, api_key: Optional[str] = None,
                 db: Optional[Database] = None):
        """
        Args:
            api_key: Anthropic API key. If None, uses ANTHROPIC_API_KEY or
                     the key saved in the config file.
            db: Database for persisting AI feedback.
        """
        api_key = api_key or Config.get_api_key()
        if api_key:
            self.client = anthropic.Anthropic(api_key=api_key)
        else:
            self.client = anthropic.Anthropic()
        self.db = db

    def summarize_history(self, summary: HistorySummary) -> str:
        """Write a coaching narrative for a slice of history.

        Args:
            summary: Output of ShotGroupAnalyzer.history_summary().

        Returns:
            Coaching text from Claude.
        """
        metrics = summary.metrics
        if metrics.session_count < 2:
            return "Need at least 2 targets for a history summary."

        stats = {
            "targets": metrics.session_count,
            "total_shots": metrics.total_shots,
            "avg_group_radius": round(metrics.average_group_radius, 3),
            "avg_mpi": [round(metrics.average_mpi.u, 3),
                        round(metrics.average_mpi.v, 3)],
            "outlier_rate_pct": round(metrics.outlier_percentage, 1),
            "trend": metrics.trend.value,
            "label": summary.label.description,
            "radius_by_target": [round(r, 3) for _, r in metrics.radius_trend],
            "confidence": metrics.confidence.value,
            "avg_std_dev": round(metrics.average_std_dev, 3),
            "avg_extreme_spread": round(metrics.average_extreme_spread, 3),
            "consistency": summary.label.consistency.value,
            "accuracy": summary.label.accuracy.value,
            "session_counts": {t.value: n for t, n in summary.session_counts.items()},
        }

        prompt = (
            f"You are an experienced pistol and rifle shooting coach. "
            f"Distances are fractions of the target radius; negative "
            f"vertical MPI means high.\n\n"
            f"{json.dumps(stats, indent=2)}\n\n"
            f"Observations already shown to the athlete:\n"
            f"{summary.insights.combined_text}\n\n"
            f"Provide:\n"
            f"1. The one pattern that matters most\n"
            f"2. What it usually indicates\n"
            f"3. One drill for the next session\n\n"
            f"Be encouraging, concise, and reference the numbers."
        )
        return self._ask(prompt, "history", max_tokens=500)

    def analyze_pressure(self, summary: HistorySummary) -> str:
        """Mental-game advice from the pressure comparison."""
        comparison = summary.pressure
        if comparison is None or comparison.percent_change is None:
            return "Need targets at both free practice and a higher pressure level."

        prompt = (
            f"You are a sports psychologist working with a shooter.\n\n"
            f"Average group radius in free practice: "
            f"{comparison.low.average_group_radius:.3f} "
            f"({comparison.low.session_count} targets)\n"
            f"Average group radius in {comparison.high_label}: "
            f"{comparison.high.average_group_radius:.3f} "
            f"({comparison.high.session_count} targets)\n"
            f"Change: {comparison.percent_change:+.0f}%\n\n"
            f"Give two specific routines to keep groups steady under pressure."
        )
        return self._ask(prompt, "pressure", max_tokens=400)

    def _ask(self, prompt: str, feedback_type: str, max_tokens: int) -> str:
        response = self.client.messages.create(
            model=MODEL,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )

        feedback = response.content[0].text
        tokens = response.usage.input_tokens + response.usage.output_tokens
        logger.info(f"AI {feedback_type} feedback received ({tokens} tokens)")

        if self.db:
            self.db.save_ai_feedback(
                pattern_id=None,
                feedback_type=feedback_type,
                prompt=prompt,
                response=feedback,
                model=MODEL,
                tokens=tokens,
            )

        return feedback
