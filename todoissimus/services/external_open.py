import asyncio
import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from config import OPEN_EXTERNAL_TIMEOUT_SECONDS, TASK_WEB_URL
from models.entities import Item

logger = logging.getLogger(__name__)

Launcher = Callable[[str], Union[Optional[bool], Awaitable[Optional[bool]]]]


class ExternalOpener:
    """Opens an item outside the app, trying candidate URLs in order.

    Candidates are the item's own url, then each of ``schemes`` (templates
    with an ``{id}`` placeholder), then the web fallback. A launcher that
    returns False, raises, or does not finish within ``timeout_s`` moves on
    to the next candidate.
    """

    def __init__(
        self,
        launch: Launcher,
        schemes: Sequence[str] = (),
        timeout_s: float = OPEN_EXTERNAL_TIMEOUT_SECONDS,
        fallback_template: str = TASK_WEB_URL,
    ) -> None:
        self._launch = launch
        self._schemes = list(schemes)
        self._timeout_s = timeout_s
        self._fallback_template = fallback_template

    def candidates(self, item: Item) -> List[str]:
        urls = []
        if item.url:
            urls.append(item.url)
        urls.extend(s.format(id=item.id) for s in self._schemes)
        fallback = self._fallback_template.format(id=item.id)
        if fallback not in urls:
            urls.append(fallback)
        return urls

    async def _try(self, url: str) -> bool:
        result = self._launch(url)
        if inspect.isawaitable(result):
            result = await asyncio.wait_for(result, self._timeout_s)
        return result is not False

    async def open_externally(self, item: Item) -> List[str]:
        """Returns the URLs attempted, the last one being the one that worked."""
        attempted: List[str] = []
        for url in self.candidates(item):
            attempted.append(url)
            try:
                if await self._try(url):
                    return attempted
            except asyncio.TimeoutError:
                logger.info(f"Opening {url} timed out")
            except (OSError, RuntimeError) as e:
                logger.info(f"Opening {url} failed: {e}")
        logger.warning(f"No way to open item {item.id} externally")
        return attempted
