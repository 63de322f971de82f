# This file re-exports the trigger functions from triggers.py
# to maintain compatibility with Firebase's expected structure

import firebase_admin
from firebase_admin import initialize_app

# Only initialize if no app exists yet
if not firebase_admin._apps:
    initialize_app()

# Import and re-export the Firestore, Storage and Identity triggers
from triggers import (  # noqa: E402
    process_attachment_upload,
    process_card_write,
    process_featured_header_write,
    process_feedback_write,
    process_header_write,
    process_resource_write,
    process_topic_write,
    process_user_creation,
)

# These exports allow Firebase to find the functions in their expected location
__all__ = [
    "process_resource_write",
    "process_card_write",
    "process_feedback_write",
    "process_header_write",
    "process_featured_header_write",
    "process_topic_write",
    "process_attachment_upload",
    "process_user_creation",
]
