class LendbookError(Exception): pass

class NotFoundError(LendbookError): pass

class ItemNotFoundError(NotFoundError): pass

class LoanNotFoundError(NotFoundError): pass

class HolderNotFoundError(NotFoundError): pass

class ConflictError(LendbookError): pass

class ItemUnavailableError(ConflictError): pass

class LoanAlreadyReturnedError(ConflictError): pass

class ForbiddenError(LendbookError): pass

class UnauthenticatedError(LendbookError): pass

class StorageUnavailableError(LendbookError): pass
