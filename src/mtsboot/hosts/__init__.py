"""
Parsing of host descriptors, as given on the command line or in a host file:
 - `host[:port]` for a direct connection to a listening server
 - `user@host[:path]` for a tunnel through a remote shell session
"""
