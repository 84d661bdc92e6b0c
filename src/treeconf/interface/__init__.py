"""
=========
Interface
=========

Command line access to ``treeconf``.

"""
