"""HawkEye — mug likelihood scoring for Torn players."""

from __future__ import annotations

__version__ = "0.2.0"

from typing import Any

from hawkeye.models import Assessment, Category, FeatureRecord  # noqa: F401


class HawkEye:
    """One-line roster scoring.

    Usage::

        results = await HawkEye("1234567").run()
        results = await HawkEye("1", "2", "3", config="my.yaml").refresh().run()
    """

    def __init__(self, *targets: str, config: Any = None):
        self._targets = [str(t) for t in targets]
        self._config = config
        self._force_refresh = False

    def refresh(self) -> HawkEye:
        """Force a history refresh before scoring."""
        self._force_refresh = True
        return self

    async def run(self) -> dict[str, Assessment]:
        from hawkeye.core.engine import MugEngine

        async with await MugEngine.open(self._resolve_config()) as engine:
            if self._force_refresh:
                await engine.refresh_history(force=True)
            return await engine.assess_many(self._targets)

    def _resolve_config(self) -> Any:
        from hawkeye.config import Settings

        if self._config is None:
            return Settings.load()
        if isinstance(self._config, str):
            return Settings.load(self._config)
        return self._config
