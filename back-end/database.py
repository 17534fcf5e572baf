from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
import logging
from typing import Any, Dict, List, Optional
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError
from config import MONGO_DETAILS, MONGO_DB_NAME, STUDENTS_COLLECTION, MONGO_TIMEOUT_MS
from helpers.exceptions import StoreNotConnectedError
from helpers.helpers import serialize_doc

logger = logging.getLogger(__name__)

LEGACY_SCHOLARSHIP_KEY = "schlarship"

def serialize_student(student: Dict[str, Any]) -> Dict[str, Any]:
    """serialize_doc plus a complete scholarship, read from the legacy key when needed"""
    if "scholarship" not in student:
        student["scholarship"] = student.pop(LEGACY_SCHOLARSHIP_KEY, None) or {}
    student["scholarship"].setdefault("merit", 0)
    student["scholarship"].setdefault("other", 0)
    return serialize_doc(student)

class StudentStore:
    """
    Handle around the single long-lived MongoDB connection.

    Created once per application, connected before serving and closed on
    shutdown. Every method issues exactly one collection call and returns
    plain dicts with the ObjectId exposed as an "id" string. Driver errors
    propagate to the caller.
    """

    def __init__(
        self,
        uri: str = MONGO_DETAILS,
        db_name: str = MONGO_DB_NAME,
        collection_name: str = STUDENTS_COLLECTION,
        timeout_ms: int = MONGO_TIMEOUT_MS,
        collection: Optional[AsyncIOMotorCollection] = None
    ):
        self.uri = uri
        self.db_name = db_name
        self.collection_name = collection_name
        self.timeout_ms = timeout_ms
        self._client: Optional[AsyncIOMotorClient] = None
        self._collection = collection

    @property
    def collection(self) -> AsyncIOMotorCollection:
        if self._collection is None:
            raise StoreNotConnectedError()
        return self._collection

    async def connect(self):
        if self._collection is not None:
            logger.info(f"Using provided collection for {self.collection_name}")
            return

        self._client = AsyncIOMotorClient(self.uri, serverSelectionTimeoutMS=self.timeout_ms)
        database = self._client[self.db_name]
        self._collection = database.get_collection(self.collection_name)

        try:
            await self._client.admin.command('ping')
            logger.info(f"Connected to MongoDB database {self.db_name} at {self.uri}")
        except PyMongoError as e:
            # Don't crash the app, requests will report the store error
            logger.error(f"Failed to connect to MongoDB: {e}")
            logger.warning("Application may have reduced functionality due to database connection issues")

    async def close(self):
        if self._client is not None:
            self._client.close()
            self._client = None
            self._collection = None
            logger.info("Closed MongoDB connection")

    async def list_students(self) -> List[Dict[str, Any]]:
        students = await self.collection.find().to_list(None)
        return [serialize_student(student) for student in students]

    async def insert_student(self, student_data: Dict[str, Any]) -> Dict[str, Any]:
        document = dict(student_data)
        result = await self.collection.insert_one(document)
        document["_id"] = result.inserted_id
        return serialize_student(document)

    async def find_student(self, student_id: ObjectId) -> Optional[Dict[str, Any]]:
        student = await self.collection.find_one({"_id": student_id})
        return serialize_student(student) if student else None

    async def replace_student(self, student_id: ObjectId, student_data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Overwrites the whole document, returns the stored result or None if nothing matched"""
        student = await self.collection.find_one_and_replace(
            {"_id": student_id},
            dict(student_data),
            return_document=ReturnDocument.AFTER
        )
        return serialize_student(student) if student else None

    async def delete_student(self, student_id: ObjectId) -> int:
        result = await self.collection.delete_one({"_id": student_id})
        return result.deleted_count
