# datasources/exceptions.py

class DataSourceError(Exception):
    pass


class SeriesSourceError(DataSourceError):
    pass


class UnknownEntity(DataSourceError):
    pass
