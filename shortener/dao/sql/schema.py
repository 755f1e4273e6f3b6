from sqlalchemy import MetaData, Table, Column, String, Text, Boolean, Uuid, false


metadata = MetaData()

url_table = Table(
    'url',
    metadata,
    Column('id', Uuid(as_uuid=False), primary_key=True),
    Column('short_url', String(255), nullable=False, unique=True),
    Column('original_url', Text, nullable=False),
    Column('user_id', Uuid(as_uuid=False), index=True),
    Column('is_deleted', Boolean, nullable=False, default=False, server_default=false()),
)
