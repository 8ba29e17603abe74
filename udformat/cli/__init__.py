"""The udf command: new, validate, print, export, import and set-root."""