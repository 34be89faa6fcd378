"""
Read-only reference tables handed to the session at bootstrap.
"""
from types import MappingProxyType

__all__ = ['REDIRECT_TAGS', 'API_QUERIES']

#: Localized ``#REDIRECT`` keywords by site language. The English keyword
#: works everywhere, so it is listed for every language.
REDIRECT_TAGS = MappingProxyType({
    'en': ('REDIRECT',),
    'ar': ('تحويل', 'REDIRECT'),
    'cs': ('PŘESMĚRUJ', 'REDIRECT'),
    'de': ('WEITERLEITUNG', 'REDIRECT'),
    'es': ('REDIRECCIÓN', 'REDIRECCION', 'REDIRECT'),
    'fa': ('تغییرمسیر', 'تغییر_مسیر', 'REDIRECT'),
    'fi': ('OHJAUS', 'UUDELLEENOHJAUS', 'REDIRECT'),
    'fr': ('REDIRECTION', 'REDIRECT'),
    'he': ('הפניה', 'REDIRECT'),
    'hu': ('ÁTIRÁNYÍTÁS', 'REDIRECT'),
    'it': ('RINVIA', 'RINVIO', 'RIMANDO', 'REDIRECT'),
    'ja': ('転送', 'リダイレクト', 'REDIRECT'),
    'ko': ('넘겨주기', 'REDIRECT'),
    'nl': ('DOORVERWIJZING', 'REDIRECT'),
    'pl': ('PATRZ', 'PRZEKIERUJ', 'TAM', 'REDIRECT'),
    'pt': ('REDIRECIONAMENTO', 'REDIRECT'),
    'ru': ('ПЕРЕНАПРАВЛЕНИЕ', 'ПЕРЕНАПР', 'REDIRECT'),
    'sv': ('OMDIRIGERING', 'REDIRECT'),
    'tr': ('YÖNLENDİRME', 'YÖNLENDİR', 'REDIRECT'),
    'uk': ('ПЕРЕНАПРАВЛЕННЯ', 'ПЕРЕНАПР', 'REDIRECT'),
    'zh': ('重定向', 'REDIRECT'),
})

#: Supported list/prop query modules: parameter prefix, the key the
#: results come under, and the field that holds each result's title.
API_QUERIES = MappingProxyType({
    'list=allcategories': ('ac', 'allcategories', '*'),
    'list=allimages': ('ai', 'allimages', 'title'),
    'list=allpages': ('ap', 'allpages', 'title'),
    'list=allusers': ('au', 'allusers', 'name'),
    'list=backlinks': ('bl', 'backlinks', 'title'),
    'list=categorymembers': ('cm', 'categorymembers', 'title'),
    'list=embeddedin': ('ei', 'embeddedin', 'title'),
    'list=exturlusage': ('eu', 'exturlusage', 'title'),
    'list=imageusage': ('iu', 'imageusage', 'title'),
    'list=logevents': ('le', 'logevents', 'title'),
    'list=recentchanges': ('rc', 'recentchanges', 'title'),
    'list=search': ('sr', 'search', 'title'),
    'list=usercontribs': ('uc', 'usercontribs', 'title'),
    'prop=categories': ('cl', 'categories', 'title'),
    'prop=images': ('im', 'images', 'title'),
    'prop=links': ('pl', 'links', 'title'),
    'prop=templates': ('tl', 'templates', 'title'),
})
