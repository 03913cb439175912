__all__ = ["NotAuthorizedException", "AccessDenied", "RecordNotFound", "ValidationException",
           "ImageUploadFailed", "MediaStoreException", "MediaDeleteIncomplete"]


class NotAuthorizedException(Exception):
    pass


# Generic Exceptions
class AccessDenied(Exception):
    pass


# DynamoDB exceptions
class RecordNotFound(Exception):
    pass


# Validations exceptions
class ValidationException(Exception):
    pass


class ImageUploadFailed(ValidationException):
    pass


# Media store exceptions
class MediaStoreException(Exception):
    pass


class MediaDeleteIncomplete(MediaStoreException):

    def __init__(self, message, deleted: int = 0):
        super(MediaDeleteIncomplete, self).__init__(message)
        self.deleted = deleted
