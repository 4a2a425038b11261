"""
Match import: parse delimited match files (local or by URL) and append them
to the match log, registering players seen for the first time.

Row format: date (YYYY-MM-DD), player1 name, score1, score2, player2 name
"""

import csv
import sqlite3
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

import requests

from ..core.database import transaction
from ..core.errors import MatchImportError
from ..core.match_log import append_match
from ..core.models import Match
from ..core.player_registry import create_player

logger = logging.getLogger(__name__)

FIELD_COUNT = 5


@dataclass
class MatchRecord:
    """A parsed row, still keyed by player name."""
    date: datetime
    player1: str
    score1: int
    score2: int
    player2: str


def _parse_score(value: str, line_num: int) -> int:
    try:
        score = int(value.strip())
    except ValueError:
        raise MatchImportError(f"Line {line_num}: score {value!r} is not an integer") from None
    if score < 0:
        raise MatchImportError(f"Line {line_num}: score {score} is negative")
    return score


def parse_match_rows(lines: Iterable[str], delimiter: str = ",",
                     has_header: bool = False) -> List[MatchRecord]:
    """
    Parse match rows. Every row is validated before anything is returned.

    Raises:
        MatchImportError: on the first malformed row, naming its line number
    """
    records = []
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise MatchImportError(f"Delimiter must be a single character, got {delimiter!r}")

    try:
        reader = csv.reader(lines, delimiter=delimiter)
    except (TypeError, ValueError, csv.Error) as e:
        raise MatchImportError(f"Unusable delimiter {delimiter!r}: {e}") from e

    rows = []
    try:
        for row in reader:
            rows.append((reader.line_num, row))
    except csv.Error as e:
        raise MatchImportError(f"Line {reader.line_num}: {e}") from e

    for line_num, row in rows:
        if has_header and line_num == 1:
            continue
        if not row or all(not field.strip() for field in row):
            continue
        if len(row) != FIELD_COUNT:
            raise MatchImportError(
                f"Line {line_num}: expected {FIELD_COUNT} fields, got {len(row)}")

        date_text, player1, score1, score2, player2 = (field.strip() for field in row)
        try:
            # Dates carry no time of day; matches are placed at midnight
            date = datetime.strptime(date_text, '%Y-%m-%d')
        except ValueError:
            raise MatchImportError(
                f"Line {line_num}: invalid date {date_text!r}, expected YYYY-MM-DD") from None

        if not player1 or not player2:
            raise MatchImportError(f"Line {line_num}: player name is empty")
        if player1 == player2:
            raise MatchImportError(f"Line {line_num}: {player1} cannot play themself")

        records.append(MatchRecord(
            date=date,
            player1=player1,
            score1=_parse_score(score1, line_num),
            score2=_parse_score(score2, line_num),
            player2=player2,
        ))
    return records


def read_match_source(source: Union[str, Path], timeout: float = 30) -> str:
    """Read match data from a local file or an http(s) URL."""
    source = str(source)
    if source.startswith(("http://", "https://")):
        logger.info(f"Fetching matches from {source}")
        try:
            response = requests.get(source, timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise MatchImportError(f"Could not download {source}: {e}") from e
        return response.text

    try:
        with open(source, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise MatchImportError(f"Could not read {source}: {e}") from e


def load_matches(conn: sqlite3.Connection, source: Union[str, Path], rating_period: int,
                 delimiter: str = ",", has_header: bool = False, timeout: float = 30) -> int:
    """
    Load a match file into the match log under the given rating period.

    The whole file is parsed before any write, and all players and matches
    are inserted in one transaction.

    Returns:
        Number of matches appended
    """
    text = read_match_source(source, timeout)
    records = parse_match_rows(text.splitlines(), delimiter, has_header)

    with transaction(conn):
        player_ids = {}
        for record in records:
            for name in (record.player1, record.player2):
                if name not in player_ids:
                    player_ids[name] = create_player(conn, name)

            append_match(conn, Match(
                date=record.date,
                player1_id=player_ids[record.player1],
                player2_id=player_ids[record.player2],
                score1=record.score1,
                score2=record.score2,
                rating_period=rating_period,
            ))

    logger.info(f"Loaded {len(records)} matches for rating period {rating_period} from {source}")
    return len(records)
