from __future__ import annotations

import logging
from typing import Callable, Dict, List

from okulkocu.core.token_store import TokenStore

logger = logging.getLogger(__name__)

DARK_BLUE = "#0D1B2A"
YELLOW = "#FFD60A"
LIGHT_BLUE = "#E8F4FD"
DARK_YELLOW = "#E6C200"

THEMES: Dict[str, Dict[str, str]] = {
    "dark": {
        "primary": DARK_BLUE,
        "accent": YELLOW,
        "background": DARK_BLUE,
        "text": YELLOW,
        "card": "rgba(255, 214, 10, 0.1)",
        "border": "rgba(255, 214, 10, 0.2)",
        "input": "#fff",
        "inputText": DARK_BLUE,
    },
    "light": {
        "primary": "#fff",
        "accent": DARK_YELLOW,
        "background": "#f5f5f5",
        "text": DARK_BLUE,
        "card": "rgba(13, 27, 42, 0.05)",
        "border": "rgba(13, 27, 42, 0.1)",
        "input": "#fff",
        "inputText": DARK_BLUE,
    },
}

ThemeListener = Callable[[bool], None]


class ThemeState:
    """Açık/koyu tema seçimi; varsayılan koyu, tercih TokenStore'da saklanır."""

    def __init__(self, store: TokenStore) -> None:
        self._store = store
        self._is_dark = True
        self._loaded = False
        self._listeners: List[ThemeListener] = []

    @property
    def is_dark(self) -> bool:
        return self._is_dark

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def name(self) -> str:
        return "dark" if self._is_dark else "light"

    @property
    def palette(self) -> Dict[str, str]:
        return dict(THEMES[self.name])

    def subscribe(self, listener: ThemeListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._is_dark)
            except Exception:
                logger.exception("Theme listener failed")

    async def load(self) -> bool:
        saved = await self._store.get_theme()
        if saved is not None:
            self._is_dark = saved == "dark"
        self._loaded = True
        self._notify()
        return self._is_dark

    async def toggle(self) -> bool:
        self._is_dark = not self._is_dark
        self._notify()
        await self._store.set_theme(self.name)
        return self._is_dark
