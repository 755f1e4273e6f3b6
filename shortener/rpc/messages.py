"""Protocol buffer messages of the `shortener.v1.Shortener` gRPC service.

The descriptors are built in code, so no generated `_pb2` modules need to be
kept in sync. The equivalent `.proto` reads:

    syntax = "proto3";
    package shortener.v1;

    service Shortener {
      rpc ShortenURL(ShortenURLRequest) returns (ShortenURLResponse);
      rpc ShortenBatch(ShortenBatchRequest) returns (ShortenBatchResponse);
      rpc DeleteURLs(DeleteURLsRequest) returns (DeleteURLsResponse);
      rpc GetURLs(GetURLsRequest) returns (GetURLsResponse);
      rpc Redirect(RedirectRequest) returns (RedirectResponse);
      rpc Ping(PingRequest) returns (PingResponse);
      rpc GetStats(GetStatsRequest) returns (GetStatsResponse);
    }

Field numbers follow declaration order in MESSAGES, starting at 1.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory


PACKAGE = 'shortener.v1'
SERVICE_NAME = f'{PACKAGE}.Shortener'

# Message name -> field declarations ('[repeated ]<type> <name>')
MESSAGES = {
    'ShortenURLRequest': ['string original_url'],
    'ShortenURLResponse': ['string short_url'],
    'BatchRequestItem': ['string correlation_id', 'string original_url'],
    'ShortenBatchRequest': ['repeated BatchRequestItem items'],
    'BatchResponseItem': ['string correlation_id', 'string short_url'],
    'ShortenBatchResponse': ['repeated BatchResponseItem items'],
    'DeleteURLsRequest': ['repeated string urls'],
    'DeleteURLsResponse': [],
    'GetURLsRequest': [],
    'UserURL': ['string short_url', 'string original_url'],
    'GetURLsResponse': ['repeated UserURL items'],
    'RedirectRequest': ['string short_url'],
    'RedirectResponse': ['string location'],
    'PingRequest': [],
    'PingResponse': [],
    'GetStatsRequest': [],
    'GetStatsResponse': ['int64 urls', 'int64 users'],
}

# RPC method -> (request message, response message)
METHODS = {
    'ShortenURL': ('ShortenURLRequest', 'ShortenURLResponse'),
    'ShortenBatch': ('ShortenBatchRequest', 'ShortenBatchResponse'),
    'DeleteURLs': ('DeleteURLsRequest', 'DeleteURLsResponse'),
    'GetURLs': ('GetURLsRequest', 'GetURLsResponse'),
    'Redirect': ('RedirectRequest', 'RedirectResponse'),
    'Ping': ('PingRequest', 'PingResponse'),
    'GetStats': ('GetStatsRequest', 'GetStatsResponse'),
}

_Field = descriptor_pb2.FieldDescriptorProto
_SCALARS = {
    'string': _Field.TYPE_STRING,
    'int64': _Field.TYPE_INT64,
}


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Describe every message and the service as a proto3 file."""
    proto = descriptor_pb2.FileDescriptorProto(name='shortener/v1/shortener.proto', package=PACKAGE, syntax='proto3')

    for message_name, declarations in MESSAGES.items():
        message = proto.message_type.add(name=message_name)
        for number, declaration in enumerate(declarations, start=1):
            kind, _, field_name = declaration.rpartition(' ')
            label = _Field.LABEL_OPTIONAL
            if kind.startswith('repeated '):
                label = _Field.LABEL_REPEATED
                kind = kind.removeprefix('repeated ')

            field = message.field.add(name=field_name, number=number, label=label)
            if kind in _SCALARS:
                field.type = _SCALARS[kind]
            else:
                field.type = _Field.TYPE_MESSAGE
                field.type_name = f'.{PACKAGE}.{kind}'

    service = proto.service.add(name='Shortener')
    for method_name, (request, response) in METHODS.items():
        service.method.add(name=method_name, input_type=f'.{PACKAGE}.{request}', output_type=f'.{PACKAGE}.{response}')

    return proto


POOL = descriptor_pool.DescriptorPool()
POOL.AddSerializedFile(build_file_descriptor().SerializeToString())


# Message name -> generated message class
CLASSES = {name: message_factory.GetMessageClass(POOL.FindMessageTypeByName(f'{PACKAGE}.{name}')) for name in MESSAGES}


ShortenURLRequest = CLASSES['ShortenURLRequest']
ShortenURLResponse = CLASSES['ShortenURLResponse']
BatchRequestItem = CLASSES['BatchRequestItem']
ShortenBatchRequest = CLASSES['ShortenBatchRequest']
BatchResponseItem = CLASSES['BatchResponseItem']
ShortenBatchResponse = CLASSES['ShortenBatchResponse']
DeleteURLsRequest = CLASSES['DeleteURLsRequest']
DeleteURLsResponse = CLASSES['DeleteURLsResponse']
GetURLsRequest = CLASSES['GetURLsRequest']
UserURL = CLASSES['UserURL']
GetURLsResponse = CLASSES['GetURLsResponse']
RedirectRequest = CLASSES['RedirectRequest']
RedirectResponse = CLASSES['RedirectResponse']
PingRequest = CLASSES['PingRequest']
PingResponse = CLASSES['PingResponse']
GetStatsRequest = CLASSES['GetStatsRequest']
GetStatsResponse = CLASSES['GetStatsResponse']

