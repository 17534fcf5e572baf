import os

# MongoDB connection
MONGO_DETAILS = os.getenv("MONGO_DETAILS", "mongodb://127.0.0.1:27017")
MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "exampleDB")
STUDENTS_COLLECTION = os.getenv("STUDENTS_COLLECTION", "students")
MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

# Server
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
