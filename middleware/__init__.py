# Copyright: 2011 MoinMoin:ThomasWaldmann
# License: GNU GPL v2 (or any later version), see LICENSE.txt for details.

"""
remotestorage gateway - middleware

Everything that is the same for all backends: authorization, conditional
requests, content classification, directory tree maintenance and listings.
"""
