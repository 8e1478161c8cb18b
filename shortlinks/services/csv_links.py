"""
Static links loaded from a CSV file at startup.

File format: a header row, then one `token,long_url` pair per row.
These links resolve like database links but have no row, so their
clicks are not counted.
"""

import csv
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Union

logger = logging.getLogger(__name__)


def _decoded_lines(raw_lines: Iterable[bytes], path: Path) -> Iterator[str]:
    """Decode line by line; an undecodable line becomes a blank one."""
    for lineno, raw in enumerate(raw_lines, start=1):
        try:
            yield raw.decode("utf-8-sig" if lineno == 1 else "utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Skipping undecodable line %d in %s: %s", lineno, path, e)
            yield "\n"


def load_csv_links(path: Union[str, Path]) -> Mapping[str, str]:
    """
    Read token -> URL mappings from a CSV file.

    A missing or unreadable file gives an empty mapping: the CSV is optional
    and never stops the service from starting. Bad records are skipped one
    at a time.
    """
    path = Path(path)
    if not path.exists():
        logger.info("CSV file %s not found, skipping static links", path)
        return MappingProxyType({})

    links: Dict[str, str] = {}
    try:
        with path.open("rb") as f:
            reader = csv.reader(_decoded_lines(f, path), strict=True)
            header_skipped = False
            while True:
                try:
                    record = next(reader)
                except StopIteration:
                    break
                except csv.Error as e:
                    logger.warning("Error reading CSV record in %s: %s", path, e)
                    header_skipped = True
                    continue

                if not header_skipped:
                    header_skipped = True
                    continue
                if len(record) < 2:
                    continue
                token, url = record[0].strip(), record[1].strip()
                if token and url:
                    links[token] = url
    except OSError as e:
        logger.warning("Failed to read CSV file %s: %s", path, e)
        return MappingProxyType({})

    logger.info("Loaded %d static links from %s", len(links), path)
    return MappingProxyType(links)
