"""Typed wrappers around the git command line."""