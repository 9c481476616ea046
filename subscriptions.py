from typing import Any, Dict, List

from pymongo.database import Database

from database import create_document, get_documents, objid
from schemas import Subscription


def subscribe(db: Database, subscriber_id: Any, channel_id: Any) -> Dict[str, Any]:
    """Record a subscriber -> channel edge.

    Repeated calls store repeated edges; nothing here de-duplicates them.
    """
    record = Subscription(subscriber=objid(subscriber_id), channel=objid(channel_id))
    return create_document(db, "subscription", record.to_document())


def count_subscribers(db: Database, channel_id: Any) -> int:
    return db["subscription"].count_documents({"channel": objid(channel_id)})


def count_subscriptions(db: Database, subscriber_id: Any) -> int:
    return db["subscription"].count_documents({"subscriber": objid(subscriber_id)})


def get_subscribers(db: Database, channel_id: Any) -> List[Dict[str, Any]]:
    return get_documents(db, "subscription", {"channel": objid(channel_id)})
