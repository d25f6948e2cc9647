"""
Service-layer exceptions.

Routes map LookupError subclasses to 404 and ValueError subclasses to 400.
Anything else (store errors) surfaces as 500.
"""


class ClientNotFound(LookupError):
    def __init__(self, client_id):
        super().__init__(f"Client {client_id} not found")
        self.client_id = client_id


class WorkflowStateNotFound(LookupError):
    def __init__(self, client_id):
        super().__init__(f"No workflow state for client {client_id}")
        self.client_id = client_id


class CardNotFound(LookupError):
    def __init__(self, card_id):
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id


class InvalidStage(ValueError):
    pass
