"""Client stub of the `shortener.v1.Shortener` gRPC service.

Example:
    >>> import grpc
    >>> from shortener.rpc import ShortenerStub, messages
    >>> with grpc.insecure_channel('localhost:3200') as channel:
    ...     stub = ShortenerStub(channel)
    ...     response, call = stub.ShortenURL.with_call(messages.ShortenURLRequest(original_url='https://go.dev/'))
    ...     token = dict(call.initial_metadata())['authorization']
"""

import grpc

from shortener.rpc import messages


class ShortenerStub:
    """One unary-unary callable per RPC method, named after the method ('stub.ShortenURL')."""

    def __init__(self, channel: grpc.Channel):
        for method, (request, response) in messages.METHODS.items():
            setattr(
                self,
                method,
                channel.unary_unary(
                    f'/{messages.SERVICE_NAME}/{method}',
                    request_serializer=messages.CLASSES[request].SerializeToString,
                    response_deserializer=messages.CLASSES[response].FromString,
                ),
            )
