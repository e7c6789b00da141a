"""Encoding and decoding of recipe bundles."""

import json
import logging
from dataclasses import dataclass
from urllib.parse import parse_qs, urlencode, urlsplit

from lzstring import LZString

from food_journal.domain.bundles import BUNDLE_VERSION, Bundle
from food_journal.domain.errors import (
    InvalidBundleFormatError,
    ItemNotFoundError,
    UnsupportedBundleVersionError,
)
from food_journal.domain.items import item_from_payload, item_to_payload
from food_journal.services.graph import DependencyGraph

SEPARATOR = "---"
SHARE_PARAM = "recipe"

_logger = logging.getLogger(__name__)
_lz = LZString()


@dataclass
class BundleCodec:
    """Exports recipes with their closure and parses bundle text."""

    graph: DependencyGraph

    def export(self, root_id: str) -> Bundle:
        """Build a bundle from a recipe and everything it depends on."""
        items = self.graph.transitive_closure(root_id)
        if not items:
            raise ItemNotFoundError(root_id)
        return Bundle(root_id=root_id, items=items)

    def decode(self, text: str) -> Bundle:
        """Parse plain, bare JSON, compact or share-link bundle text."""
        return _envelope_to_bundle(_parse_text(text))


def to_envelope(bundle: Bundle) -> dict[str, object]:
    """Return the JSON envelope for a bundle."""
    return {
        "version": bundle.version,
        "rootId": bundle.root_id,
        "items": [item_to_payload(item) for item in bundle.items],
    }


def encode_plain(bundle: Bundle) -> str:
    """Return the human-readable form: a header line, separator, then JSON."""
    root = bundle.root
    header = f"Recipe: {root.name if root else 'Shared Items'}\n{SEPARATOR}\n"
    return header + json.dumps(to_envelope(bundle), ensure_ascii=False)


def encode_compact(bundle: Bundle) -> str:
    """Return the compressed, URL-safe form."""
    payload = json.dumps(to_envelope(bundle), ensure_ascii=False, separators=(",", ":"))
    return _lz.compressToEncodedURIComponent(payload)


def share_link(bundle: Bundle, base_url: str) -> str:
    """Return a link carrying the compact bundle as a query parameter."""
    joiner = "&" if "?" in base_url else "?"
    return f"{base_url}{joiner}{urlencode({SHARE_PARAM: encode_compact(bundle)})}"


def _parse_text(text: str) -> object:
    stripped = text.strip()
    if not stripped:
        raise InvalidBundleFormatError("Bundle text is empty")
    if stripped.startswith("{"):
        strategies = [json.loads]
    elif SEPARATOR in stripped:
        # Compact payloads may contain the separator too.
        strategies = [_parse_plain, _parse_compact, json.loads]
    else:
        strategies = [_parse_compact, json.loads]
    error: Exception | None = None
    for strategy in strategies:
        try:
            return strategy(stripped)
        except (ValueError, InvalidBundleFormatError) as exc:
            _logger.info("Bundle decode via %s failed: %s", strategy.__name__, exc)
            error = exc
    raise InvalidBundleFormatError("Invalid bundle format or corrupted data") from error


def _parse_plain(text: str) -> object:
    return json.loads(text.partition(SEPARATOR)[2].strip())


def _parse_compact(text: str) -> object:
    return _decompress(_extract_link_payload(text))


def _extract_link_payload(text: str) -> str:
    if f"{SHARE_PARAM}=" not in text:
        return text
    query = urlsplit(text).query or text.partition("?")[2]
    values = parse_qs(query).get(SHARE_PARAM)
    return values[0] if values else text


def _decompress(compact: str) -> object:
    try:
        decompressed = _lz.decompressFromEncodedURIComponent(compact)
    except Exception as exc:  # noqa: BLE001
        raise InvalidBundleFormatError(
            "Compact bundle could not be decompressed"
        ) from exc
    if not decompressed:
        raise InvalidBundleFormatError("Compact bundle could not be decompressed")
    return json.loads(decompressed)


def _envelope_to_bundle(data: object) -> Bundle:
    if not isinstance(data, dict):
        raise InvalidBundleFormatError("Bundle envelope must be a JSON object")
    version = data.get("version", data.get("v"))
    if version != BUNDLE_VERSION:
        raise UnsupportedBundleVersionError(version)
    raw_items = data.get("items")
    if not isinstance(raw_items, list):
        raise InvalidBundleFormatError("Bundle has no item list")
    try:
        items = [item_from_payload(row) for row in raw_items]
    except (KeyError, TypeError, AttributeError) as exc:
        raise InvalidBundleFormatError("Bundle contains a malformed item") from exc
    root_id = data.get("rootId", data.get("root"))
    if root_id is None and items:
        root_id = items[0].id
    return Bundle(root_id=str(root_id), items=items)
