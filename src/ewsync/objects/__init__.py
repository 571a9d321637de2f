"""Items and folders."""

from .base import BaseShape, PropertySet, ServiceObject, create_object_from_element_name
from .folders import CalendarFolder, ContactsFolder, Folder, SearchFolder, TasksFolder
from .items import Body, Contact, Item, Message

__all__ = [
    'ServiceObject',
    'PropertySet',
    'BaseShape',
    'create_object_from_element_name',

    'Item',
    'Message',
    'Contact',
    'Body',

    'Folder',
    'CalendarFolder',
    'ContactsFolder',
    'SearchFolder',
    'TasksFolder',
]
