#!/usr/bin/env python3
import argparse
import logging
import sys
import traceback
from getpass import getpass

from impacket.examples import logger
from impacket.examples.utils import parse_target

from netshare.client import connect_srvsvc, list_shares


def main(argv=None):
    ap = argparse.ArgumentParser(add_help=True, description="List SMB disk shares through srvsvc NetShareEnumAll")
    ap.add_argument("target", action="store", help="[[domain/]username[:password]@]<targetName or address>")
    ap.add_argument("-hashes", action="store", metavar="LMHASH:NTHASH", help="NTLM hashes, format is LMHASH:NTHASH")
    ap.add_argument("-no-pass", action="store_true", help="don't ask for password (useful for null sessions)")
    ap.add_argument("-port", choices=["139", "445"], nargs="?", default="445", metavar="destination port",
                    help="Destination port to connect to SMB Server")
    ap.add_argument("-special", action="store_true", help="also list hidden/administrative disk shares (C$, ADMIN$...)")
    ap.add_argument("-ts", action="store_true", help="Adds timestamp to every logging output")
    ap.add_argument("-debug", action="store_true", help="Turn DEBUG output ON")
    options = ap.parse_args(argv)

    logger.init(options.ts, options.debug)

    domain, username, password, address = parse_target(options.target)

    lmhash = nthash = ""
    if options.hashes:
        try:
            lmhash, nthash = options.hashes.split(":")
        except ValueError:
            logging.error("hashes must be in the form LMHASH:NTHASH")
            return 1

    if password == "" and username != "" and not options.hashes and not options.no_pass:
        password = getpass("Password:")

    try:
        rpctransport = connect_srvsvc(address, username, password, domain, lmhash, nthash,
                                      port=int(options.port))
    except Exception as e:
        logging.error("connect failed: %s", e)
        return 1

    try:
        shares = list_shares(rpctransport, include_special=options.special)
    except Exception as e:
        if logging.getLogger().level == logging.DEBUG:
            traceback.print_exc()
        logging.error("NetShareEnumAll failed: %s", e)
        return 1
    finally:
        rpctransport.disconnect()

    for share in shares:
        print(f"{share.name}\t{share.comment}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
