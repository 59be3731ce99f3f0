from enum import Enum


class EnumEnvironment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class EnumLogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnumRegistryType(str, Enum):
    MEMORY = "memory"
    MONGODB = "mongodb"


# Alarm names shared by the projector, the Mongo registry and health checks
ORION_ALARM = "ORION-ALARM"
MONGO_ALARM = "MONGO-ALARM"

# NGSI attribute defaults used when projecting a web service
LOCATION_TYPE = "geo:point"
LOCATION_DEFAULT = "0, 0"
DATETIME_TYPE = "DateTime"
DATETIME_DEFAULT = "1970-01-01T00:00:00.000Z"
ATTRIBUTE_DEFAULT = " "

COMMAND_STATUS_SUFFIX = "_status"
COMMAND_RESULT_SUFFIX = "_info"
COMMAND_STATUS_TYPE = "commandStatus"
COMMAND_RESULT_TYPE = "commandResult"
COMMAND_STATUS_INITIAL = "UNKNOWN"
COMMAND_RESULT_INITIAL = " "

TIMESTAMP_ATTRIBUTE = "TimeInstant"
TIMESTAMP_TYPE = "DateTime"
