# -*- coding: utf-8 -*-
"""
    perun_proxy
    ~~~~~~~~~~~~~~~~

    Response micro services releasing attributes and capabilities
    from the Perun identity registry during a single sign-on flow.

    :license: APACHE 2.0
"""
