# cardapio/errors.py

# Error taxonomy for the storefront and checkout flow.
# Configuration errors are fixed by the store owner, validation errors by the
# customer; EmptyCartError marks a state the client must never reach.

from __future__ import annotations


class CardapioError(Exception):
    status_code = 400

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class StoreNotFound(CardapioError):
    status_code = 404

    def __init__(self, subdomain: str):
        super().__init__("Restaurante não encontrado")
        self.subdomain = subdomain


class ItemNotFound(CardapioError):
    status_code = 404


class ConfigurationError(CardapioError):
    status_code = 409


class EmptyCartError(CardapioError):
    status_code = 409

    def __init__(self):
        super().__init__("Carrinho vazio")


class CheckoutValidationError(CardapioError):
    status_code = 422

    def __init__(self, errors: list[str], message: str = "Preencha todos os campos obrigatórios"):
        super().__init__(message, errors)
