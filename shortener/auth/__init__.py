from shortener.auth.tokens import TokenService


__all__ = ['TokenService']
