import logging
import sys

from pymail.mail.parser import parse_header


def main(path: str = None) -> str:
    if path is None:
        data = sys.stdin.read()
    else:
        with open(path, 'r', encoding='utf-8') as f:
            data = f.read()

    header = parse_header(data)
    for field in header.fields:
        for element, value, error in field.errors:
            logging.warning('%s kept as text: %s', element, error.reason)

    return header.encoded()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s', handlers=[logging.StreamHandler()])
    sys.stdout.write(main(sys.argv[1] if len(sys.argv) > 1 else None))
