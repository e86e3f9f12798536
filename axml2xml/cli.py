import pathlib
import sys
import zipfile

import click
from loguru import logger

from .errors import ResParserError
from .parser import AXMLParser
from .printer import AXMLPrinter

LOG_FORMAT = "{line: >4}:{level}:\t{message}"


def setup_logging(verbose: bool) -> None:
    logger.remove()  # All configured handlers are removed
    logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG" if verbose else "WARNING")


def read_input(path: pathlib.Path, member: str) -> bytes:
    """
    Read the AXML data from a plain file, or from a member of an
    APK (or any other ZIP) archive.
    """
    if not zipfile.is_zipfile(path):
        return path.read_bytes()

    logger.debug(f"{path} is an archive, reading {member}")
    with zipfile.ZipFile(path) as apk:
        try:
            return apk.read(member)
        except KeyError:
            raise click.ClickException(f"{member} not found in {path}")


@click.command(short_help='Decode Android binary XML')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=pathlib.Path))
@click.option('-m', '--apk-member', default='AndroidManifest.xml', show_default=True,
              help='File to decode when INPUT_FILE is an APK')
@click.option('-o', '--output', type=click.File('w', encoding='utf-8'), default='-',
              help='Write the XML to this file instead of stdout')
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
@click.option('--strings', 'dump_strings', is_flag=True, help='Print the string pool and exit')
def app(input_file, apk_member, output, verbose, dump_strings):
    '''Decode the binary XML in INPUT_FILE into text XML.'''
    setup_logging(verbose)
    raw_buff = read_input(input_file, apk_member)

    try:
        if dump_strings:
            AXMLParser(raw_buff).sb.show(file=output)
            return
        xml = AXMLPrinter(raw_buff).get_xml()
    except ResParserError as e:
        click.echo(f"error: {e}", err=True)
        sys.exit(1)

    output.write(xml)


if __name__ == "__main__":
    app()
