"""
Transports towards remote workers. A transport is a plain bidirectional byte stream:
 - stream: the two stream implementations, a tcp socket and the stdio of a spawned process
 - connect: turns a HostSpec into a connected stream, including the remote shell command line
"""
