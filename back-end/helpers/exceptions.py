class StudentRecordsError(Exception):
    """Base exception for student record errors"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class StoreNotConnectedError(StudentRecordsError):
    """Exception for using the student store before connect() was awaited"""
    def __init__(self, message: str = "Student store is not connected"):
        super().__init__(message)
