from shortener.api.routes import ping, redirect_url, shorten_url, stats, user_urls


__all__ = ['ping', 'redirect_url', 'shorten_url', 'stats', 'user_urls']
