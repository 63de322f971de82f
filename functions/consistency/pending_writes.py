from typing import List

from firebase_admin import firestore, storage
from models.constants import MAX_BATCH_SIZE
from models.data_models import (
    DeleteDocument,
    DeleteStorageObject,
    DeleteStoragePrefix,
    PendingWrite,
    SetDocument,
    UpdateDocument,
)
from utils.logging_utils import get_logger

STORAGE_WRITES = (DeleteStoragePrefix, DeleteStorageObject)


def delete_storage_prefix(bucket, prefix: str) -> int:
    """
    Delete every object under a prefix.

    Args:
        bucket: Cloud Storage bucket
        prefix: Object name prefix, e.g. user_uploads/{authorId}/{resourceId}/{cardId}/

    Returns:
        The number of objects deleted
    """
    deleted = 0
    for blob in bucket.list_blobs(prefix=prefix):
        blob.delete()
        deleted += 1
    return deleted


def delete_storage_object(bucket, path: str) -> bool:
    # get_blob returns None instead of raising when the object is gone
    blob = bucket.get_blob(path)
    if blob is None:
        return False
    blob.delete()
    return True


def _add_to_batch(db: firestore.Client, batch: firestore.WriteBatch, write) -> None:
    ref = db.document(write.path)
    if isinstance(write, SetDocument):
        batch.set(ref, write.data, merge=write.merge)
    elif isinstance(write, UpdateDocument):
        batch.update(ref, write.fields)
    elif isinstance(write, DeleteDocument):
        batch.delete(ref)
    else:
        raise TypeError(f"Unsupported document write: {type(write).__name__}")


def commit_pending_writes(
    db: firestore.Client, writes: List[PendingWrite], bucket=None
) -> None:
    """
    Apply the writes produced by a recomputation.

    Storage deletions run first so that a document is never removed while the
    files it owns still exist. Document writes are committed in batches of at
    most MAX_BATCH_SIZE operations. Any failure propagates to the caller so the
    platform can retry the whole invocation.

    Args:
        db: Firestore client
        writes: Pending writes in application order
        bucket: Cloud Storage bucket, defaults to the project's default bucket
    """
    logger = get_logger(__name__)

    storage_writes = [w for w in writes if isinstance(w, STORAGE_WRITES)]
    document_writes = [w for w in writes if not isinstance(w, STORAGE_WRITES)]

    if storage_writes and bucket is None:
        bucket = storage.bucket()

    for write in storage_writes:
        if isinstance(write, DeleteStoragePrefix):
            deleted = delete_storage_prefix(bucket, write.prefix)
            logger.info(f"Deleted {deleted} objects under {write.prefix}")
        else:
            if delete_storage_object(bucket, write.path):
                logger.info(f"Deleted object {write.path}")
            else:
                logger.info(f"Object {write.path} already gone")

    for start in range(0, len(document_writes), MAX_BATCH_SIZE):
        chunk = document_writes[start : start + MAX_BATCH_SIZE]
        batch = db.batch()
        for write in chunk:
            _add_to_batch(db, batch, write)
        batch.commit()
        logger.info(f"Committed batch with {len(chunk)} document writes")
