from __future__ import annotations

from typing import Optional


class StudentLookupError(Exception):
    code = "lookup_error"


class LookupInputError(StudentLookupError):
    code = "lookup_input"

    def __init__(self) -> None:
        super().__init__("Veuillez saisir votre code CIN")


class LookupConfigurationError(StudentLookupError):
    code = "lookup_configuration"

    def __init__(self) -> None:
        super().__init__("Configuration Supabase manquante")


class LookupRequestError(StudentLookupError):
    code = "lookup_request"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class StudentNotFoundError(StudentLookupError):
    code = "student_not_found"

    def __init__(self, cin: str) -> None:
        self.cin = cin
        super().__init__("Aucun étudiant trouvé avec ce code CIN")
