"""Building blocks for the ClickHouse native protocol: columns, blocks, handshake info, LZ4 and CityHash."""

__version__ = "0.1.0"