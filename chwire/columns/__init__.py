"""Column codecs for ClickHouse data types, with the wire encoder and decoder."""