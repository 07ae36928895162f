from rest_framework import exceptions, status


class Unauthorized(exceptions.PermissionDenied):
    default_detail = "You don't have permission to perform this action."
    default_code = "unauthorized"


class LoginRequired(Unauthorized):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "You need to be logged in to perform this action."
