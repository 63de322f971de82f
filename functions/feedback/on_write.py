from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from consistency.change_classifier import (
    Change,
    ChangeKind,
    parse_document,
    snapshot_to_dict,
)
from consistency.self_write_guard import fields_to_write, within_quiescence_window
from firebase_admin import firestore
from models.constants import (
    DEFAULT_QUIESCENCE_WINDOW,
    CardFields,
    Collections,
    FeedbackFields,
    PathParams,
    QueryOperators,
)
from models.data_models import PendingWrite, UpdateDocument
from models.pydantic_models import FeedbackDocument
from utils.logging_utils import get_logger
from utils.path_utils import card_path, feedback_path


def select_feedback_preview(
    db: firestore.Client, change: Change, params: Dict[str, str]
) -> List[PendingWrite]:
    """
    Show the latest open reviewer comment on its card.

    Picks the feedback with reviewerComment == true and locked == false that
    was updated last, and copies its text and its own path to the card. With
    no such feedback both preview fields are removed. The card is only written
    when the preview actually changes.

    Args:
        db: Firestore client
        change: The classified write under the card's feedback collection
        params: Path parameters, must contain resourceId and cardId

    Returns:
        The card update, or nothing
    """
    logger = get_logger(__name__)

    resource_id = params[PathParams.RESOURCE_ID]
    card_id = params[PathParams.CARD_ID]
    path = card_path(resource_id, card_id)

    card_ref = db.document(path)
    card_data = snapshot_to_dict(card_ref.get())
    if card_data is None:
        logger.info(f"Card {path} is gone, skipping feedback preview")
        return []

    latest_query = (
        card_ref.collection(Collections.FEEDBACK)
        .where(FeedbackFields.REVIEWER_COMMENT, QueryOperators.EQUALS, True)
        .where(FeedbackFields.LOCKED, QueryOperators.EQUALS, False)
        .order_by(FeedbackFields.DATE_UPDATED, direction=firestore.Query.DESCENDING)
        .limit(1)
    )
    latest = next(iter(latest_query.stream()), None)

    if latest is None:
        proposed = {
            CardFields.FEEDBACK_PREVIEW_COMMENT: firestore.DELETE_FIELD,
            CardFields.FEEDBACK_PREVIEW_COMMENT_PATH: firestore.DELETE_FIELD,
        }
    else:
        feedback = parse_document(
            FeedbackDocument, latest.to_dict() or {}, latest.reference.path
        )
        if feedback is None:
            return []
        proposed = {
            CardFields.FEEDBACK_PREVIEW_COMMENT: feedback.comment_text,
            CardFields.FEEDBACK_PREVIEW_COMMENT_PATH: latest.reference.path,
        }

    fields = fields_to_write(card_data, proposed)
    if not fields:
        return []

    logger.info(f"Updating feedback preview of card {path}")
    return [UpdateDocument(path, fields)]


def touch_feedback(
    change: Change,
    params: Dict[str, str],
    quiescence_window: timedelta = DEFAULT_QUIESCENCE_WINDOW,
    now: Optional[datetime] = None,
) -> List[PendingWrite]:
    """
    Stamp dateUpdated on a new or edited feedback document.

    The stamp is a write to the same document, so it fires this trigger again;
    the second round sees a dateUpdated within the quiescence window and
    writes nothing. A document without a locked field gets locked == false,
    the preview query only matches documents that carry it.
    """
    if change.is_deleted:
        return []

    fields = {}
    if FeedbackFields.LOCKED not in change.current:
        fields[FeedbackFields.LOCKED] = False

    edited = change.is_updated and change.changed(FeedbackFields.COMMENT_TEXT)
    if change.is_created or edited:
        now = now or datetime.now(timezone.utc)
        if not within_quiescence_window(
            change.current.get(FeedbackFields.DATE_UPDATED), now, quiescence_window
        ):
            fields[FeedbackFields.DATE_UPDATED] = now

    if not fields:
        return []

    path = feedback_path(
        params[PathParams.RESOURCE_ID],
        params[PathParams.CARD_ID],
        params[PathParams.FEEDBACK_ID],
    )
    return [UpdateDocument(path, fields)]


def on_feedback_written(
    db: firestore.Client,
    change: Change,
    params: Dict[str, str],
    quiescence_window: timedelta = DEFAULT_QUIESCENCE_WINDOW,
    now: Optional[datetime] = None,
) -> List[PendingWrite]:
    if change.kind == ChangeKind.NOOP:
        return []
    writes = []
    writes.extend(touch_feedback(change, params, quiescence_window, now))
    writes.extend(select_feedback_preview(db, change, params))
    return writes
