""" granular filtering and shortening of log messages """
import logging

from perun_proxy.exception import InvalidConfigurationError

"""
the log filter dict uses following format:
  key: 'module:function_name'
  values:
      bool: False: skip message; True: leave message unmolested
      int:  truncate message to int characters
      str: prefix message with this string (for emphasis etc.)

A typical use is truncating the registry audit lines, which carry the
complete raw response:
  {'rpc_connector:_call': 500}
"""


class SuccinctLogFilter(logging.Filter):
    def __init__(self, log_filter_config: dict):
        super().__init__()
        for k, v in log_filter_config.items():
            if not isinstance(k, str):
                raise InvalidConfigurationError('LogFilter key must be of type str')
            if not isinstance(v, (bool, int, str)):
                raise InvalidConfigurationError('LogFilter value must be of type bool, int or str')
        self.config = dict(log_filter_config)

    def filter(self, record: logging.LogRecord) -> bool:
        _from = "{}:{}".format(record.module, record.funcName)
        if _from not in self.config:
            return True
        _val = self.config[_from]
        if isinstance(_val, bool):
            return _val
        message = record.getMessage()
        if isinstance(_val, int):
            record.msg = message[:_val]
        else:
            record.msg = _val + message
        record.args = ()
        return True
