from typing import List, Optional

from consistency.pending_writes import commit_pending_writes
from firebase_admin import firestore
from models.constants import UserFields
from models.data_models import PendingWrite, SetDocument
from utils.logging_utils import get_logger
from utils.path_utils import user_path


def on_user_created(
    uid: str,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
) -> List[PendingWrite]:
    """
    Mirror a new identity-provider account into users/{uid}.

    Only the optional fields the provider actually supplied are written, so an
    existing profile field is never blanked.
    """
    logger = get_logger(__name__)

    if not uid:
        logger.warning("User creation event without a uid, ignoring")
        return []

    user_data = {
        UserFields.UID: uid,
        UserFields.CREATED_AT: firestore.SERVER_TIMESTAMP,
    }
    optional_fields = {
        UserFields.DISPLAY_NAME: display_name,
        UserFields.EMAIL: email,
        UserFields.PHONE_NUMBER: phone_number,
    }
    user_data.update({k: v for k, v in optional_fields.items() if v})

    logger.info(f"Creating user document for {uid}")
    return [SetDocument(user_path(uid), user_data, merge=True)]


def mirror_new_user(
    db: firestore.Client,
    uid: str,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
    phone_number: Optional[str] = None,
) -> bool:
    """
    Write the users/{uid} document for an account that is being created.

    This runs inside the sign-up request, so a failed write is logged and
    reported through the return value instead of rejecting the sign-up.

    Returns:
        True when the document was written, False otherwise
    """
    logger = get_logger(__name__)

    writes = on_user_created(
        uid,
        display_name=display_name,
        email=email,
        phone_number=phone_number,
    )
    try:
        commit_pending_writes(db, writes)
    except Exception as e:
        logger.error(f"Error creating user document for {uid}: {str(e)}")
        return False
    return bool(writes)
