# main.py
# -*- coding: utf-8 -*-
import sys
import logging
import argparse

import cli


def setup_logging(debug=False):
    """Configures the root logger once: console only, INFO (or DEBUG) level."""
    log_level = logging.DEBUG if debug else logging.INFO
    log_format = '%(asctime)s - %(levelname)s - %(message)s'
    log_datefmt = '%H:%M:%S'
    log_formatter = logging.Formatter(log_format, log_datefmt)
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers if necessary
    for handler in root_logger.handlers[:]:
        try:
            root_logger.removeHandler(handler)
            handler.close()
        except Exception as e_handler:
            logging.warning(f"Could not remove/close handler: {e_handler}")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)
    logging.debug("Logging configured (debug mode).")


def run(argv=None):
    # --debug is consumed here, everything else goes to the CLI parser
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--debug", action="store_true")
    pre_args, remaining = pre_parser.parse_known_args(argv)

    setup_logging(pre_args.debug)
    return cli.main(remaining)


if __name__ == "__main__":
    sys.exit(run())
