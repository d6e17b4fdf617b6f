"""Prompt corpus loading.

Fetches the prompt table over HTTP and extracts its ``text`` column.
Every failure falls back to a fixed built-in prompt list, so callers
always receive a usable corpus.
"""

import logging
import re

import httpx

from src.core.config import get_settings
from src.core.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)

FALLBACK_PROMPTS: tuple[str, ...] = (
    "హైదరాబాద్ విశ్వవిద్యాలయం ఉన్నత విద్యా రంగంలో అగ్రగామిగా ఉంది.",
    "తెలుగు భాషా పరిశోధన కోసం ఈ సమాచారాన్ని సేకరిస్తున్నాము.",
    "భాషా శాస్త్రం మానవ మేధస్సును అర్థం చేసుకోవడానికి ఒక మార్గం.",
    "సమాచార సేకరణ ద్వారా సాంకేతికతను మెరుగుపరచవచ్చు.",
    "విద్యార్థులు పరిశోధనలో చురుకుగా పాల్గొనాలి.",
)

TEXT_COLUMN = "text"

# A comma is a field boundary only when an even number of quotes follow it
_FIELD_SPLIT = re.compile(r',(?=(?:(?:[^"]*"){2})*[^"]*$)')
_LINE_SPLIT = re.compile(r"\r?\n")


def split_csv_line(line: str) -> list[str]:
    """Split one CSV row on commas that sit outside double-quoted fields."""
    return _FIELD_SPLIT.split(line)


def _unquote(field: str) -> str:
    if field.startswith('"'):
        field = field[1:]
    if field.endswith('"'):
        field = field[:-1]
    return field.strip()


def parse_corpus(csv_text: str) -> tuple[str, ...]:
    """Extract the prompts from a CSV table with a ``text`` column.

    Args:
        csv_text: Full body of the CSV resource; the first non-blank line
            is the header.

    Returns:
        The non-empty prompts in row order.

    Raises:
        SourceUnavailableError: If the table has no data rows, no ``text``
            column, or no usable prompts.
    """
    lines = [line for line in _LINE_SPLIT.split(csv_text) if line.strip()]
    if len(lines) < 2:
        raise SourceUnavailableError("Empty dataset")

    headers = [h.strip().lower() for h in lines[0].split(",")]
    try:
        column = headers.index(TEXT_COLUMN)
    except ValueError:
        raise SourceUnavailableError(f'Column "{TEXT_COLUMN}" not found') from None

    prompts: list[str] = []
    for line in lines[1:]:
        cells = split_csv_line(line)
        if column >= len(cells):
            continue
        prompt = _unquote(cells[column])
        if prompt:
            prompts.append(prompt)

    if not prompts:
        raise SourceUnavailableError("No valid prompts found")
    return tuple(prompts)


class CorpusLoader:
    """Loads the prompt corpus once per call, never raising.

    A single GET is attempted per ``load()``; there is no retry. Any
    network, status or parse failure is logged and answered with
    ``FALLBACK_PROMPTS``.
    """

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            url: CSV location (falls back to settings if not provided).
            timeout: Request timeout in seconds.
            client: Optional pre-built ``httpx.AsyncClient`` (used by tests).
        """
        settings = get_settings()
        self._url = url or settings.corpus_url
        self._timeout = timeout if timeout is not None else settings.corpus_timeout
        self._client = client
        self.used_fallback = False

    async def _fetch(self) -> str:
        try:
            if self._client is not None:
                resp = await self._client.get(self._url, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.get(self._url)
            resp.raise_for_status()
            return resp.text
        except httpx.HTTPStatusError as exc:
            raise SourceUnavailableError(
                f"Corpus fetch returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"Corpus fetch failed: {exc}") from exc

    async def load(self) -> tuple[str, ...]:
        """Fetch and parse the corpus, or return the fallback prompts."""
        try:
            prompts = parse_corpus(await self._fetch())
        except SourceUnavailableError as exc:
            logger.warning("Dataset loading error (%s); using fallback prompts", exc.detail)
            self.used_fallback = True
            return FALLBACK_PROMPTS
        except Exception:
            logger.exception("Unexpected error loading corpus; using fallback prompts")
            self.used_fallback = True
            return FALLBACK_PROMPTS

        self.used_fallback = False
        logger.info("Loaded %d prompts from %s", len(prompts), self._url)
        return prompts
