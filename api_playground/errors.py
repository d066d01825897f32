# Exception Handlers
#
# Domain errors are raised where they are detected and caught by the dispatcher,
# which formats them as a JSON:API error document, for example:
# {
#     "errors": [{
#         "status": "404",
#         "title": "Record not found",
#         "detail": "Could not find recipe with id '42'"
#     }]
# }
#
# Infrastructure errors (connection failures, statement errors, ...) are not
# JsonapiError subclasses and propagate to the application's error handling.
#
from http import HTTPStatus
from sqlalchemy.exc import DontWrapMixin
import api_playground
from .util import humanize


class ConfigurationError(ValueError):
    """
    This exception is raised when a model declaration can't be normalized
    """


class JsonapiError(Exception, DontWrapMixin):
    """
    Base class for the errors that are returned to the client as a JSON:API error document
    """

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR.value
    title = "Generic Error"
    detail = ""

    def __init__(self, detail="", status_code=None):
        Exception.__init__(self, detail or self.title)
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail

    @property
    def status(self) -> str:
        """
        :return: the http status as a string, as required by JSON:API
        """
        return str(self.status_code)

    def error_object(self, **members) -> dict:
        result = {"status": self.status, "title": self.title, "detail": self.detail}
        result.update(members)
        return result

    def to_errors(self) -> list:
        """
        :return: list of JSON:API error objects
        """
        return [self.error_object()]


class ModelNotFoundError(JsonapiError):
    """
    This exception is raised when the requested model isn't registered in the playground
    """

    status_code = HTTPStatus.NOT_FOUND.value
    title = "Model not found"

    def __init__(self, model_name, available_models=()):
        super().__init__(f"The requested model '{model_name}' is not available in the playground")
        self.model_name = model_name
        self.available_models = list(available_models)
        api_playground.log.warning("Model not found: %s", model_name)

    def to_errors(self):
        return [self.error_object(available_models=self.available_models)]


class RecordNotFoundError(JsonapiError):
    """
    This exception is raised when no record exists with the requested id
    """

    status_code = HTTPStatus.NOT_FOUND.value
    title = "Record not found"

    def __init__(self, model_name, record_id):
        super().__init__(f"Could not find {model_name} with id '{record_id}'")
        self.model_name = model_name
        self.record_id = record_id
        api_playground.log.info("Record not found: %s %s", model_name, record_id)


class RequestNotSupportedError(JsonapiError):
    """
    This exception is raised when the operation isn't enabled for the model
    """

    status_code = HTTPStatus.METHOD_NOT_ALLOWED.value
    title = "Request not supported"

    def __init__(self, model_name, operation):
        super().__init__(f"The model '{model_name}' does not support {operation} operations")
        self.operation = operation
        api_playground.log.warning("Request not supported: %s %s", model_name, operation)


class ParameterMissingError(JsonapiError):
    """
    This exception is raised when the request body lacks the "data" or "attributes" members
    """

    status_code = HTTPStatus.BAD_REQUEST.value
    title = "Parameter missing"
    pointer = "/data/attributes"

    def __init__(self, param):
        super().__init__(f"Required parameter missing: {param}")
        self.param = param
        api_playground.log.warning("Parameter missing: %s", param)

    def to_errors(self):
        return [self.error_object(source={"pointer": self.pointer})]


class ValidationError(JsonapiError):
    """
    This exception is raised when the record can't be saved because of invalid attribute values
    Every (attribute, message) pair results in one error object
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY.value
    title = "Validation Error"

    def __init__(self, field_errors):
        """
        :param field_errors: list of (attribute name, message) tuples
        """
        self.field_errors = list(field_errors)
        super().__init__("; ".join(self.full_message(attr, msg) for attr, msg in self.field_errors))
        api_playground.log.warning("ValidationError: %s", self.detail)

    @staticmethod
    def full_message(attr_name, message):
        """
        :return: message prefixed with the human readable attribute name, e.g. "Title can't be blank"
        """
        return f"{humanize(attr_name)} {message}"

    def to_errors(self):
        return [
            self.error_object(detail=self.full_message(attr, msg), source={"pointer": f"/data/attributes/{attr}"})
            for attr, msg in self.field_errors
        ]


class DeletionError(JsonapiError):
    """
    This exception is raised when the storage refused to remove the record
    """

    status_code = HTTPStatus.UNPROCESSABLE_ENTITY.value
    title = "Deletion Error"

    def __init__(self, model_name, record_id):
        super().__init__("The resource could not be deleted")
        self.pointer = f"/data/{model_name}/{record_id}"
        api_playground.log.warning("Deletion failed: %s", self.pointer)

    def to_errors(self):
        return [self.error_object(source={"pointer": self.pointer})]


class UnAuthorizedError(JsonapiError):
    """
    This exception is raised when the api key is missing, unknown or expired
    """

    status_code = HTTPStatus.UNAUTHORIZED.value
    title = "Unauthorized"

    def __init__(self, detail):
        super().__init__(detail)
        api_playground.log.warning("UnAuthorizedError: %s", detail)


def jsonapi_error_document(exc: JsonapiError) -> dict:
    """
    :param exc: domain error
    :return: JSON:API error document
    """
    return {"errors": exc.to_errors()}
