# /annotation_backend/services/sentence_service.py

"""
Business logic for the sentence corpus: single and bulk creation, CSV import,
admin listing and logical deletion.

Sentence text is immutable once stored; the only state change is
`is_active`. Bulk creation and CSV import are per-item: one bad row is
reported and skipped, never rolled back together with the good ones.
"""

import io
import logging
from typing import Dict, List, Optional

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import NotFoundError, ValidationError
from ..core.languages import normalize_language
from ..db.base_class import utcnow
from ..models import sentence_model
from .database_service import DatabaseService

logger = logging.getLogger(__name__)

REQUIRED_CSV_COLUMNS = ["source_text", "source_language", "target_language"]
OPTIONAL_CSV_COLUMNS = ["machine_translation", "domain"]


def _insert(payload: sentence_model.SentenceCreate, db: DatabaseService):
    record = payload.model_dump()
    record["is_active"] = True
    record["created_at"] = utcnow()
    return db.add_sentence(record)


def create_sentence(payload: sentence_model.SentenceCreate, db: DatabaseService):
    sentence = _insert(payload, db)
    logger.info("Created sentence %s (%s -> %s)", sentence.id, sentence.source_language, sentence.target_language)
    return sentence


def bulk_create(payloads: List[dict], db: DatabaseService) -> sentence_model.BulkSentenceResponse:
    """
    Validates and inserts each item on its own. Invalid items are reported by
    their position in the request instead of failing the whole request.
    """
    response = sentence_model.BulkSentenceResponse(created=[])
    for index, raw in enumerate(payloads):
        try:
            payload = sentence_model.SentenceCreate.model_validate(raw)
        except PydanticValidationError as e:
            reason = "; ".join(err["msg"] for err in e.errors())
            response.failed.append(sentence_model.BulkSentenceFailure(index=index, reason=reason))
            continue
        response.created.append(sentence_model.Sentence.model_validate(_insert(payload, db)))
    logger.info("Bulk sentence creation: %d created, %d failed", len(response.created), len(response.failed))
    return response


def _cell(row: pd.Series, column: str) -> Optional[str]:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def import_csv(file_bytes: bytes, db: DatabaseService) -> sentence_model.SentenceImportResponse:
    """
    Imports sentences from a CSV with at least the columns source_text,
    source_language and target_language. Rows that duplicate an active
    sentence for the same language pair are skipped, as are invalid rows,
    which are also listed in `errors`.
    """
    if not file_bytes:
        raise ValidationError("The uploaded CSV file is empty.")
    try:
        df = pd.read_csv(io.BytesIO(file_bytes), dtype=str, keep_default_na=False, na_values=[""])
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValidationError(f"Could not parse the CSV file: {e}")

    df.columns = [str(c).strip().lower() for c in df.columns]
    missing = [c for c in REQUIRED_CSV_COLUMNS if c not in df.columns]
    if missing:
        raise ValidationError(f"CSV is missing required column(s): {', '.join(missing)}.")

    imported, skipped, errors = 0, 0, []
    for position, (_, row) in enumerate(df.iterrows()):
        line = position + 2  # 1-based, after the header row
        raw = {column: _cell(row, column) for column in REQUIRED_CSV_COLUMNS + OPTIONAL_CSV_COLUMNS}
        try:
            payload = sentence_model.SentenceCreate.model_validate(raw)
        except PydanticValidationError as e:
            skipped += 1
            errors.append(f"Row {line}: " + "; ".join(err["msg"] for err in e.errors()))
            continue
        if db.find_active_duplicate_sentence(payload.source_text, payload.source_language, payload.target_language):
            skipped += 1
            continue
        _insert(payload, db)
        imported += 1

    total_rows = len(df)
    logger.info("CSV import: %d imported, %d skipped of %d rows", imported, skipped, total_rows)
    return sentence_model.SentenceImportResponse(
        message=f"Imported {imported} of {total_rows} sentences.",
        imported_count=imported,
        skipped_count=skipped,
        total_rows=total_rows,
        errors=errors,
    )


# --- Queries ---

def get_sentence(sentence_id: int, db: DatabaseService, include_inactive: bool = False):
    sentence = db.get_sentence(sentence_id)
    if sentence is None or (not sentence.is_active and not include_inactive):
        raise NotFoundError("Sentence not found.")
    return sentence


def list_active(db: DatabaseService, skip: int = 0, limit: int = 100):
    return db.list_active_sentences(skip, limit)


def list_for_admin(
    db: DatabaseService,
    skip: int = 0,
    limit: int = 100,
    source_language: Optional[str] = None,
    target_language: Optional[str] = None,
):
    return db.list_sentences_for_admin(
        skip, limit, normalize_language(source_language) or None, normalize_language(target_language) or None
    )


def counts_by_language_pair(db: DatabaseService) -> Dict[str, int]:
    """Active sentences per pair, keyed "Source-Target" (e.g. "English-French")."""
    return {
        f"{row['source_language']}-{row['target_language']}": row["count"]
        for row in db.count_sentences_by_language_pair()
    }


def deactivate(sentence_id: int, db: DatabaseService):
    """Logical delete: the sentence disappears from distribution but keeps its history."""
    sentence = get_sentence(sentence_id, db, include_inactive=True)
    sentence = db.set_sentence_active(sentence, False)
    logger.info("Deactivated sentence %s", sentence.id)
    return sentence
