from warden_identity.application.context.principal import Principal

__all__ = ["Principal"]
