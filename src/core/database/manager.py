from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from loguru import logger

from src.core.config import MongoSettings


class MongoManager:
    def __init__(self, settings: Optional[MongoSettings] = None):
        self.settings = settings or MongoSettings()
        self.client: Optional[AsyncMongoClient] = None
        self.db: Optional[AsyncDatabase] = None

    @property
    def connection_url(self) -> str:
        return f"mongodb://{self.settings.host}:{self.settings.port}"

    def init(self):
        try:
            self.client = AsyncMongoClient(self.connection_url)
            self.db = self.client[self.settings.database_name]
            logger.info(f"Connected to MongoDB (Async): {self.connection_url}/{self.settings.database_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise e

    async def close(self):
        if self.client is not None:
            await self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self.db = None

    def get_collection(self, collection_name: str):
        if self.db is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.db[collection_name]
