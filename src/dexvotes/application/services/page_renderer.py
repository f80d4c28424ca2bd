#--- src/dexvotes/application/services/page_renderer.py ---
"""
Server-side meta injection for the voting page.

The HTML template carries literal placeholder tokens (`{{OG_TITLE}}` ...).
`PLACEHOLDERS` enumerates every injection point; values are HTML-escaped and
substituted in a single pass, so injected text is never scanned again and
unknown tokens are left alone.

The page must render whatever the upstream does: lookup failures are logged
and the configured default copy is used.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Mapping, Optional
from urllib.parse import quote

from dexvotes.application.formatters import chain_reward_symbol, escape_html, format_magnitude
from dexvotes.application.services.pair_selector import select_best_pair
from dexvotes.application.services.token_data_service import TokenDataService
from dexvotes.domain.entities import RenderContext

log = logging.getLogger(__name__)

DEFAULT_TEMPLATE_PATH = Path(__file__).resolve().parents[2] / "interfaces" / "api" / "static" / "index.html"

PLACEHOLDERS = (
    "PAGE_TITLE",
    "OG_TITLE",
    "OG_DESCRIPTION",
    "OG_IMAGE",
    "TWITTER_TITLE",
    "TWITTER_DESCRIPTION",
    "TWITTER_IMAGE",
    "ICON_URL",
    "TOKEN_ADDRESS",
    "PAGE_URL",
)

_PLACEHOLDER_RE = re.compile(r"\{\{([A-Z_]+)\}\}")

MIN_PATH_ADDRESS_LENGTH = 10


class PageRenderer:

    def __init__(
        self,
        token_data: TokenDataService,
        template: str,
        default_title: str,
        default_og_title: str,
        default_description: str,
        default_image: str = "",
        image_mode: str = "self",
        screenshot_url_template: str = "",
        icon_url_template: str = "",
    ):
        self.token_data = token_data
        self.template = template
        self.default_title = default_title
        self.default_og_title = default_og_title
        self.default_description = default_description
        self.default_image = default_image
        self.image_mode = image_mode
        self.screenshot_url_template = screenshot_url_template
        self.icon_url_template = icon_url_template

    @classmethod
    def load_template(cls, path: Optional[str] = None) -> str:
        return Path(path or DEFAULT_TEMPLATE_PATH).read_text(encoding="utf-8")

    @staticmethod
    def resolve_address(request_path: str, query_params: Mapping[str, str]) -> Optional[str]:
        """`?ca=` wins; otherwise the last non-empty path segment if it looks like an address."""
        ca = (query_params.get("ca") or "").strip()
        if ca:
            return ca
        segments = [s for s in (request_path or "").split("/") if s]
        if not segments:
            return None
        candidate = segments[-1]
        if len(candidate) > MIN_PATH_ADDRESS_LENGTH and "/" not in candidate:
            return candidate
        return None

    def image_url(self, address: str, host: str, scheme: str) -> str:
        if self.image_mode == "screenshot":
            return self.screenshot_url_template.format(url=f"{scheme}://{host}/{quote(address, safe='')}")
        return f"{scheme}://{host}/og/{quote(address, safe='')}.png"

    def _default_values(self, page_url: str) -> Dict[str, str]:
        return {
            "PAGE_TITLE": self.default_title,
            "OG_TITLE": self.default_og_title,
            "OG_DESCRIPTION": self.default_description,
            "OG_IMAGE": self.default_image,
            "TWITTER_TITLE": self.default_og_title,
            "TWITTER_DESCRIPTION": self.default_description,
            "TWITTER_IMAGE": self.default_image,
            "ICON_URL": "",
            "TOKEN_ADDRESS": "",
            "PAGE_URL": page_url,
        }

    async def build_context(
        self,
        request_path: str,
        query_params: Mapping[str, str],
        host: str,
        scheme: str = "https",
    ) -> RenderContext:
        page_url = f"{scheme}://{host}{request_path or '/'}"
        ctx = RenderContext(values=self._default_values(page_url))
        ctx.address = self.resolve_address(request_path, query_params)
        if not ctx.address:
            return ctx
        ctx.values["TOKEN_ADDRESS"] = ctx.address

        try:
            doc = await self.token_data.get(ctx.address)
        except Exception as e:
            log.error(f"API Error while rendering page for {ctx.address[:8]}...: {e}")
            return ctx

        pair = select_best_pair(doc)
        if pair is None:
            log.info(f"No pairs for {ctx.address[:8]}..., rendering default copy")
            return ctx
        ctx.pair = pair

        symbol = pair.display_symbol
        reward = chain_reward_symbol(pair.chain_id)
        mcap = format_magnitude(pair.display_market_cap)
        title = f"{pair.display_name} ({symbol}) — Vote to Earn {reward}"
        description = (
            f"🗳 Vote {symbol} and earn {reward} rewards from the community voting pool. "
            f"Market Cap: {mcap}"
        )
        image = self.image_url(ctx.address, host, scheme)
        icon = pair.image_url or self.icon_url_template.format(chain=pair.chain_id or "unknown", address=ctx.address)

        ctx.display = {"name": pair.display_name, "symbol": symbol, "reward": reward, "market_cap": mcap}
        ctx.values.update({
            "PAGE_TITLE": title,
            "OG_TITLE": title,
            "OG_DESCRIPTION": description,
            "OG_IMAGE": image,
            "TWITTER_TITLE": title,
            "TWITTER_DESCRIPTION": description,
            "TWITTER_IMAGE": image,
            "ICON_URL": icon,
        })
        return ctx

    def inject(self, values: Mapping[str, str]) -> str:
        escaped = {key: escape_html(values.get(key, "")) for key in PLACEHOLDERS}

        def _sub(match: "re.Match[str]") -> str:
            return escaped.get(match.group(1), match.group(0))

        return _PLACEHOLDER_RE.sub(_sub, self.template)

    async def render(
        self,
        request_path: str,
        query_params: Mapping[str, str],
        host: str,
        scheme: str = "https",
    ) -> str:
        ctx = await self.build_context(request_path, query_params, host, scheme)
        return self.inject(ctx.values)
