#
# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Exceptions defined by this package"""

class EcpError(Exception):
  """Base class for all error exceptions defined by this package."""
  pass

class EcpConfigError(EcpError):
  """A configuration value is invalid (e.g., a discovery source address that
     is not assigned to a local interface)."""
  pass

class AppListParseError(EcpError):
  """A single <app> element of an app list could not be parsed."""
  pass
