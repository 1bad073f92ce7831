#! /usr/bin/env python3

import argparse
import collections
import glob
import os
import os.path
import re
import sys

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter


# Subdirectories never scanned for papers (study group reports and
# miscellaneous documents).
EXCLUDE_DIRS = ('reports', 'misc')


# Letters that start a numbered paper name: P for a paper, D for a
# draft circulated for discussion.
PAPER_KINDS = 'dp'


# The name of a numbered paper revision, e.g. p1234r5.html.
PAPER_RE = re.compile(r'([%s])([0-9]{4})r([0-9]+)\.html' % PAPER_KINDS)


# The files considered, relative to the top-level directory.
GLOB_PATTERN = '*/*.html'


class CMarkdownConverter(MarkdownConverter):

    """Convert HTML to Markdown for paper titles."""

    class Options(MarkdownConverter.DefaultOptions):
        escape_misc = True


def convert_to_md(content):
    """Convert some HTML content to Markdown."""
    soup = BeautifulSoup(content, 'html5lib')
    return CMarkdownConverter().convert_soup(soup).strip()


def parse_paper_name(filename):
    """Split the name of a numbered paper into kind, number and
    revision, or return None if it is not the name of a numbered
    paper."""
    m = PAPER_RE.fullmatch(filename)
    if not m:
        return None
    return (m.group(1), int(m.group(2)), int(m.group(3)))


def get_title(filename, markdown=False):
    """Get the title of a paper from its first h1 heading.

    Only the <p> and </p> wrappers that the paper generator puts
    inside the heading are removed; any other markup in the heading
    is kept as it is, unless markdown is true, in which case the
    title is converted to Markdown."""
    with open(filename, 'r', encoding='utf-8') as f:
        content = f.read()
    soup = BeautifulSoup(content, 'html5lib')
    heading = soup.find('h1')
    if heading is None:
        raise ValueError('could not find title in %s' % filename)
    title = ''.join(str(c) for c in heading.contents)
    title = title.replace('<p>', '')
    title = title.replace('</p>', '')
    if markdown:
        title = convert_to_md(title)
    return title


def collect_papers(root='.', exclude_dirs=EXCLUDE_DIRS):
    """Find the papers under root.  Return a dict mapping each paper
    number to its revisions, as (revision, kind, directory, filename)
    tuples in ascending order, and a sorted list of (filename, path)
    for the other papers."""
    numbered = collections.defaultdict(list)
    others = []
    for path in glob.glob(GLOB_PATTERN, root_dir=root):
        dirname, filename = os.path.split(path)
        if dirname in exclude_dirs:
            continue
        paper = parse_paper_name(filename)
        if paper is None:
            others.append((filename, '%s/%s' % (dirname, filename)))
        else:
            kind, number, revision = paper
            numbered[number].append((revision, kind, dirname, filename))
    for revs in numbered.values():
        revs.sort()
    others.sort()
    return dict(numbered), others


def title_for(root, path, markdown, errors):
    """Get the title of the paper at path (relative to root).  If
    errors is a list, failures are added to it and None is returned;
    otherwise they propagate."""
    filename = os.path.join(root, path)
    if errors is None:
        return get_title(filename, markdown)
    try:
        return get_title(filename, markdown)
    except (OSError, ValueError) as e:
        errors.append((path, e))
        return None


def link_for_rev(number, rev):
    """Generate a Markdown link for a paper revision."""
    revision, kind, dirname, filename = rev
    return '[%s%04dr%d](%s)' % (kind, number, revision, filename)


def format_index(numbered, others, root='.', markdown_titles=False,
                 errors=None):
    """Format the Markdown index of papers found by collect_papers."""
    out_list = ['# Papers with Numbers\n']
    for number in sorted(numbered.keys()):
        revs = numbered[number]
        # The latest revision provides the title for the group.
        revision, kind, dirname, filename = revs[-1]
        title = title_for(root, '%s/%s' % (dirname, filename),
                          markdown_titles, errors)
        if title is None:
            continue
        out_list.append('- %04d %s: %s\n'
                        % (number, title,
                           ' '.join(link_for_rev(number, rev) for rev in revs)))
    out_list.append('\n# Other Papers\n')
    for filename, path in others:
        title = title_for(root, path, markdown_titles, errors)
        if title is None:
            continue
        out_list.append('- %s: [%s](%s)\n' % (title, filename, path))
    return ''.join(out_list)


def main(argv=None):
    """Main program."""
    parser = argparse.ArgumentParser(
        description='Print a Markdown index of HTML papers')
    parser.add_argument('-C', '--directory',
                        help='Directory to scan instead of the current one',
                        default='.')
    parser.add_argument('--exclude',
                        help='Also skip papers in this subdirectory',
                        action='append', default=[], metavar='DIR')
    parser.add_argument('--no-default-excludes',
                        help='Do not skip %s' % ', '.join(EXCLUDE_DIRS),
                        action='store_true')
    parser.add_argument('--keep-going',
                        help='Report all papers without a title, not '
                        'just the first',
                        action='store_true')
    parser.add_argument('--markdown-titles',
                        help='Convert HTML in titles to Markdown',
                        action='store_true')
    args = parser.parse_args(argv)
    exclude_dirs = () if args.no_default_excludes else EXCLUDE_DIRS
    # Compare with the names glob returns, e.g. 'drafts' for 'drafts/'.
    exclude_dirs += tuple(os.path.normpath(d) for d in args.exclude)
    numbered, others = collect_papers(args.directory, exclude_dirs)
    errors = [] if args.keep_going else None
    index_md = format_index(numbered, others, args.directory,
                            args.markdown_titles, errors)
    if errors:
        for path, e in errors:
            print('%s: %s' % (path, e), file=sys.stderr)
        sys.exit(1)
    print(index_md, end='')


if __name__ == '__main__':
    main()
