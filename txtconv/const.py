# Copyright (c) 2013-2025 NASK. All rights reserved.

import os.path as osp


TOPLEVEL_TXTCONV_PACKAGES = ('txtconv',)


ETC_DIR = '/etc/txtconv'
USER_DIR = osp.expanduser('~/.txtconv')


# the name of the codec used when no other one is specified
# (for percent-encoding, query strings, base64 text payloads...)
DEFAULT_ENCODING = 'utf-8'
