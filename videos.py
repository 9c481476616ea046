from typing import Any, Dict, List, Optional

from pymongo import ReturnDocument
from pymongo.database import Database

from database import create_document, get_documents, now, objid
from schemas import Video


def create_video(
    db: Database,
    owner_id: Any,
    videofile: str,
    thumbnail: str,
    title: str,
    duration: float,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    record = Video(
        videofile=videofile,
        thumbnail=thumbnail,
        title=title,
        description=description,
        duration=duration,
        owner=objid(owner_id),
    )
    return create_document(db, "video", record.to_document())


def increment_views(db: Database, video_id: Any) -> Optional[Dict[str, Any]]:
    return db["video"].find_one_and_update(
        {"_id": objid(video_id)},
        {"$inc": {"views": 1}, "$set": {"updatedAt": now()}},
        return_document=ReturnDocument.AFTER,
    )


def toggle_publish_status(db: Database, video_id: Any) -> Optional[Dict[str, Any]]:
    video = db["video"].find_one({"_id": objid(video_id)})
    if not video:
        return None
    return db["video"].find_one_and_update(
        {"_id": video["_id"]},
        {"$set": {"isPublished": not video.get("isPublished", True), "updatedAt": now()}},
        return_document=ReturnDocument.AFTER,
    )


def get_channel_videos(db: Database, owner_id: Any, published_only: bool = True) -> List[Dict[str, Any]]:
    query: Dict[str, Any] = {"owner": objid(owner_id)}
    if published_only:
        query["isPublished"] = True
    return get_documents(db, "video", query)
